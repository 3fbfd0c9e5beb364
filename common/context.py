from dataclasses import dataclass

from constants.roles import Role


@dataclass(frozen=True)
class ActorContext:
    """
    Who is acting, on behalf of which organization.
    Built once per HTTP request by the auth backend and passed explicitly into
    every service call.
    """
    user_id: int
    org_id: int
    role: Role
