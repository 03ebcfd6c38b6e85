"""Ministry-Grants - Donor-advised fund grant management: giving funds, ministries, and the grant request, approval and funding workflow."""

__version__ = "1.0.0"
__author__ = "Ministry-Grants Developers"
__description__ = "Donor-advised fund grant management: giving funds, ministries, and the grant request, approval and funding workflow"

__all__ = ["__version__", "__author__", "__description__"]
