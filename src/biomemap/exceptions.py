"""Custom exceptions for map generation."""


class MapGenError(Exception):
    """Base exception for map generation errors."""

    pass


class ConfigurationError(MapGenError):
    """Raised when a map configuration is rejected before generation."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid map configuration: " + "; ".join(problems))


class ClassificationError(MapGenError):
    """Raised when a cell height matches no tier or no intra-biome threshold."""

    def __init__(self, x: int, y: int, height: float, reason: str):
        self.x = x
        self.y = y
        self.height = height
        super().__init__(f"Cannot classify cell ({x}, {y}) at height {height:.4f}: {reason}")


class RiverWalkError(MapGenError):
    """Raised when a single river walk cannot be completed."""

    def __init__(self, source: object, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"River from {source} abandoned: {reason}")
