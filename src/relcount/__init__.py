"""Count GitHub release downloads and Flathub installs."""

__version__ = "0.1.0"
