import numpy as np
import pytest

from lssm.collection import CollectionStatistics


@pytest.fixture
def small_collection() -> CollectionStatistics:
    """Three-term, three-document collection with a rank-2 decomposition."""
    return CollectionStatistics(
        vocabulary=["a", "b", "c"],
        df=[2, 1, 3],
        gf=[4, 2, 6],
        Uk=np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 0.0]]),
        Sk=np.diag([2.0, 1.0]),
        Vtk=np.array([[1.0, 0.0, 1.0], [0.0, 1.0, -1.0]]),
        document_ids=["m1", "m2", "m3"],
    )


@pytest.fixture
def random_collection() -> CollectionStatistics:
    rng = np.random.default_rng(7)
    V, k, N = 12, 4, 9
    vocabulary = [f"t{i}" for i in range(V)]
    df = rng.integers(1, N + 1, size=V)
    gf = df * rng.integers(1, 5, size=V)
    return CollectionStatistics(
        vocabulary=vocabulary,
        df=df,
        gf=gf,
        Uk=rng.normal(size=(V, k)),
        Sk=np.diag(np.sort(rng.uniform(0.5, 5.0, size=k))[::-1]),
        Vtk=rng.normal(size=(k, N)),
    )
