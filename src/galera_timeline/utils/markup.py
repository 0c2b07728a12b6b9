class PlainMarkup:
    """Leaves message fragments untouched."""

    def good(self, text: str) -> str:
        return text

    def bad(self, text: str) -> str:
        return text


class AnsiMarkup(PlainMarkup):
    """Colors healthy fragments green and alarming ones red on a terminal."""

    GREEN = "\033[32m"
    RED = "\033[31m"
    RESET = "\033[0m"

    def good(self, text: str) -> str:
        return f"{self.GREEN}{text}{self.RESET}"

    def bad(self, text: str) -> str:
        return f"{self.RED}{text}{self.RESET}"


def markup_for(color: str, is_tty: bool) -> PlainMarkup:
    """Pick the markup for a color setting (auto, always, never)."""
    if color == "always" or (color == "auto" and is_tty):
        return AnsiMarkup()
    return PlainMarkup()
