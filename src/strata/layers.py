from enum import Enum


class Layer(Enum):
    """Mutually exclusive generation contexts; exactly one is active at a time."""

    OVERWORLD = "overworld"
    CAVE = "cave"
    DUNGEON = "dungeon"

    @classmethod
    def parse(cls, value: str) -> "Layer":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown layer {value!r}; expected one of {[m.value for m in cls]}") from None
