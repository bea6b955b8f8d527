from app.models.member import Member, RoleAssignment

__all__ = ["Member", "RoleAssignment"]
