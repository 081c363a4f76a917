"""Service integrations for the Space and Microsoft Graph APIs."""

__all__ = [
    "message_sender",
    "space_adapter",
    "team_creator",
    "teams_adapter",
    "user_resolver",
]
