import io, pytest

T0 = 1_700_000_000 * 1_000_000_000

class Clock:
    def __init__(self, t: int = T0):
        self.t = t
    def __call__(self) -> int:
        return self.t
    def advance(self, seconds: float) -> None:
        self.t += int(seconds * 1_000_000_000)

@pytest.fixture()
def out():
    return io.StringIO()

@pytest.fixture()
def clock():
    return Clock()
