import pandas as pd
import pytest

from modelboard.artifacts.local_store import LocalArtifactStore
from modelboard.artifacts.memory_store import MemoryArtifactStore
from modelboard.artifacts.s3_store import S3ArtifactStore
from modelboard.artifacts.sql_store import SqlArtifactStore
from modelboard.db.session import make_engine

from tests.fakes import FakeS3Client, TickingClock


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture(params=["local", "memory", "sql", "s3"])
def store(request, tmp_path, clock):
    if request.param == "local":
        return LocalArtifactStore(str(tmp_path / "board"), clock=clock)
    if request.param == "memory":
        return MemoryArtifactStore(clock=clock)
    if request.param == "sql":
        return SqlArtifactStore(make_engine("sqlite://"), clock=clock)
    return S3ArtifactStore(
        bucket="boards", prefix="team/", client=FakeS3Client(page_size=2), clock=clock
    )


@pytest.fixture
def cars():
    return pd.DataFrame(
        {
            "cyl": [6.0, 6.0, 4.0, 6.0, 8.0, 6.0, 8.0, 4.0],
            "disp": [160.0, 160.0, 108.0, 258.0, 360.0, 225.0, 360.0, 146.7],
            "hp": [110.0, 110.0, 93.0, 110.0, 175.0, 105.0, 245.0, 62.0],
            "mpg": [21.0, 21.0, 22.8, 21.4, 18.7, 18.1, 14.3, 24.4],
        }
    )
