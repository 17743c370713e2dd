from .models import Admin, Category, Product, ExpiryAction, Settings

__all__ = ["Admin", "Category", "Product", "ExpiryAction", "Settings"]
