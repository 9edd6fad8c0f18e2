"""PhishLens: multi-framework phishing assessment for email messages."""

__version__ = "1.0.0"
