import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Garante que src e src/shipping estejam no path (layout de pacote Lambda)
_root = Path(__file__).resolve().parents[1]
for _path in (_root / "src" / "shipping", _root / "src"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


@dataclass
class FakeLambdaContext:
    function_name: str = "calculate-shipping"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:calculate-shipping"
    aws_request_id: str = "c6af9ac6-7b61-11e6-9a41-93e812345678"


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()
