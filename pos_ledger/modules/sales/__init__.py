from .cart import Cart, CartLine
from .receipt import render_receipt_html, write_receipt_pdf

__all__ = ["Cart", "CartLine", "render_receipt_html", "write_receipt_pdf"]
