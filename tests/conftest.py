import sys
import types
from pathlib import Path

import pytest

from binapigen import GeneratorConfig, PythonGenerator, load_package

DATA_DIR = Path(__file__).parent / "data"
SAMPLE_API = DATA_DIR / "vpe.api.json"


def load_generated(source: str, name: str):
    """Execute generated source as module `name`"""
    module = types.ModuleType(name)
    sys.modules[name] = module
    exec(compile(source, f"<{name}>", "exec"), module.__dict__)
    return module


@pytest.fixture
def sample_package():
    return load_package(SAMPLE_API)


@pytest.fixture
def sample_source(sample_package):
    return PythonGenerator(sample_package, GeneratorConfig()).generate()


@pytest.fixture
def vpe(sample_source):
    module = load_generated(sample_source, "generated_vpe")
    yield module
    sys.modules.pop("generated_vpe", None)
