"""vsbootstrap - Module tree discovery for Visual Studio solutions."""

__version__ = "0.1.0"
