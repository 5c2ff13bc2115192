from pydantic import BaseModel, ConfigDict, Field


class PositionedToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Horizontal page coordinate")
    y: float = Field(..., description="Vertical page coordinate")
    text: str = Field(default="", description="Decoded fragment text")


class LayoutPage(BaseModel):
    page: int = Field(default=1, ge=1)
    tokens: list[PositionedToken] = Field(default_factory=list)
    text: str | None = Field(
        default=None,
        description="Plain page text when the layout producer provides it.",
    )

    def has_coordinates(self) -> bool:
        return bool(self.tokens)


class LayoutResult(BaseModel):
    pages: list[LayoutPage] = Field(default_factory=list)
