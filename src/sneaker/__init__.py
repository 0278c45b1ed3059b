"""sneaker: email notifications for captured application exceptions."""

__version__ = "0.1.0"
