from __future__ import annotations

import pytest
import requests_mock as requests_mock_lib


@pytest.fixture()
def requests_mock():
    with requests_mock_lib.Mocker() as mocker:
        yield mocker
