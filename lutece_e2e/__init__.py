"""Browser-driven end-to-end harness for the Lutece CMS."""

__version__ = "1.0.0"
