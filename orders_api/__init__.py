"""Orders API: an order store on Redis with an HTTP front end."""

__version__ = "0.1.0"
