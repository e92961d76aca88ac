"""
Entry point for `python -m pdfsignvalidator`.

Usage:
    python -m pdfsignvalidator count document.pdf
    python -m pdfsignvalidator info document.pdf
    python -m pdfsignvalidator check document.pdf issuer.pem
"""

from .cli import main

main()
