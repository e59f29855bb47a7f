"""Company disclosure and stock quote collection service."""
