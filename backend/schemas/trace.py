from pydantic import BaseModel


class Point(BaseModel):
    x: float
    y: float
    t: float | None = None  # ms since stroke start


class CanvasSize(BaseModel):
    width: float
    height: float


class VerifyRequest(BaseModel):
    challenge_id: str | None = None
    path: list[Point] | None = None
    canvas: CanvasSize | None = None
