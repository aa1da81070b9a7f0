from .me import CompanyMembersView, MeView

__all__ = ["MeView", "CompanyMembersView"]
