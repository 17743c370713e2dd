from .provisioning import create_admin

__all__ = ['create_admin']
