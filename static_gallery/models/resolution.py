"""
Module: resolution
Purpose: Target resolution dataclass.
"""

from dataclasses import dataclass

MIN_SIDE = 150


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int

    @classmethod
    def parse(cls, value: str) -> "Resolution":
        """
        Parse "WxH" into a Resolution.

        Raises:
            ValueError: If the value is malformed or below the minimum size.
        """
        parts = value.lower().split("x")
        if len(parts) != 2:
            raise ValueError(f"Invalid resolution '{value}', must be in format WxH")
        try:
            width = int(parts[0].strip())
            height = int(parts[1].strip())
        except ValueError as exc:
            raise ValueError(f"Invalid resolution '{value}'") from exc
        if width < MIN_SIDE or height < MIN_SIDE:
            raise ValueError(f"Resolution '{value}' is too low (minimum {MIN_SIDE}x{MIN_SIDE})")
        return cls(width, height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"
