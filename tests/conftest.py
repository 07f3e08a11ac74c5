from __future__ import annotations

import pytest

from secure_headers.builder import SecureHeadersBuilder, create_builder


@pytest.fixture
def builder() -> SecureHeadersBuilder:
    """Fresh builder for every test; builders are never shared."""
    return create_builder()
