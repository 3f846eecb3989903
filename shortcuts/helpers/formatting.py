import colorama
from colorama import Fore, Style

colorama.init(autoreset=True)


def format_timestamp(seconds: float) -> str:
    """Return ``seconds`` as ``M:SS`` with unbounded minutes."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters."""
    return text if len(text) <= limit else text[:limit]

__all__ = ["Fore", "Style", "format_timestamp", "truncate"]
