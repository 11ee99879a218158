from importlib.metadata import version

from codechunk import __version__
from codechunk.version import get_version


def test_version_comes_from_package_metadata() -> None:
    assert get_version() == version("codechunk")
    assert __version__ == get_version()
