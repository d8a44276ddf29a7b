from __future__ import annotations

import json
from typing import Any
from unittest.mock import Mock


def mock_response(payload: Any, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.content = json.dumps(payload).encode()
    response.text = json.dumps(payload)
    response.json.return_value = payload
    return response
