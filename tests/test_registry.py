"""Tests for core.registry."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from agents.reviewer import ReviewerAgent
from core.pipeline import GenerationPipeline
from core.registry import SubsystemId, SubsystemRegistry, SubsystemUnavailable
from utils.template_engine import TemplateLibrary


def test_default_registry_fills_every_role():
    registry = SubsystemRegistry.default(completion=MagicMock())
    assert registry.ids() == list(SubsystemId)
    assert isinstance(registry.get(SubsystemId.CODE_GENERATION), GenerationPipeline)
    assert isinstance(registry.get(SubsystemId.TEMPLATE), TemplateLibrary)


def test_default_registry_shares_reviewer_for_validation_roles():
    registry = SubsystemRegistry.default(completion=MagicMock())
    pipeline = registry.get(SubsystemId.CODE_GENERATION)
    protocol = registry.get(SubsystemId.PROTOCOL)
    assert isinstance(protocol, ReviewerAgent)
    assert pipeline.validator is protocol


def test_register_rejects_handle_missing_capability():
    registry = SubsystemRegistry(mapping={})
    with pytest.raises(TypeError, match="SecurityScanner"):
        registry.register(SubsystemId.SECURITY, object())


def test_constructor_checks_handles():
    with pytest.raises(TypeError):
        SubsystemRegistry(mapping={SubsystemId.LEARNING: object()})


def test_register_get_unregister():
    scanner = MagicMock(spec=["scan"])
    scanner.scan = AsyncMock(return_value={})
    registry = SubsystemRegistry(mapping={})

    registry.register(SubsystemId.SECURITY, scanner)
    assert registry.get(SubsystemId.SECURITY) is scanner
    assert registry.require(SubsystemId.SECURITY) is scanner
    assert registry.ids() == [SubsystemId.SECURITY]

    registry.unregister(SubsystemId.SECURITY)
    assert registry.get(SubsystemId.SECURITY) is None


def test_register_accepts_string_ids():
    scanner = MagicMock(spec=["scan"])
    scanner.scan = AsyncMock()
    registry = SubsystemRegistry(mapping={})
    registry.register("security", scanner)
    assert registry.get(SubsystemId.SECURITY) is scanner


def test_require_missing_raises():
    registry = SubsystemRegistry(mapping={})
    with pytest.raises(SubsystemUnavailable, match="code_generation"):
        registry.require(SubsystemId.CODE_GENERATION)
    assert registry.get(SubsystemId.CODE_GENERATION) is None


def test_unknown_id_is_rejected():
    registry = SubsystemRegistry(mapping={})
    with pytest.raises(ValueError):
        registry.register("deployment", MagicMock())
