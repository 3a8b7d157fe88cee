"""Unit tests for the publication state machine and publisher."""

import asyncio
import logging
import uuid

import pytest

from app.db.models import AdminActionType, Template, TemplateStatus
from app.interfaces.template import StateTransitionError
from app.strategies.moderation.publisher import TemplatePublisher
from app.strategies.moderation.state_machine import (
    REJECTION_REASON_MAX_LENGTH,
    REJECTION_REASON_MIN_LENGTH,
    PublicationAction,
    next_status,
    normalize_rejection_reason,
)
from app.strategies.repositories.memory import InMemoryTemplateRepository

ADMIN_ID = uuid.UUID("3c5ff1b3-b0d6-4dba-b254-a2be667bbd52")
VALID_REASON = "Placeholder labels are unclear"


def _template(status: TemplateStatus = TemplateStatus.PENDING) -> Template:
    return Template(
        title="Kira Sözleşmesi",
        description="Standart konut kira sözleşmesi şablonu",
        body="Kiracı {tenant} aylık {rent} TL öder.",
        placeholders={
            "tenant": {"type": "string", "label": "Kiracı", "required": True, "order": 0},
            "rent": {"type": "number", "label": "Kira", "required": True, "order": 1},
        },
        created_by=uuid.uuid4(),
        status=status,
    )


# =============================================================================
# State Machine Tests
# =============================================================================


class TestStateMachine:
    """Test suite for the pure transition rules."""

    def test_pending_transitions(self):
        assert next_status(TemplateStatus.PENDING, PublicationAction.APPROVE) is TemplateStatus.PUBLISHED
        assert next_status(TemplateStatus.PENDING, PublicationAction.REJECT) is TemplateStatus.REJECTED

    @pytest.mark.parametrize("status", [TemplateStatus.PUBLISHED, TemplateStatus.REJECTED])
    @pytest.mark.parametrize("action", list(PublicationAction))
    def test_terminal_states(self, status, action):
        """Test that published and rejected templates accept no decision."""
        with pytest.raises(StateTransitionError) as exc_info:
            next_status(status, action)

        assert exc_info.value.reason == "invalid_state"

    def test_reason_is_stripped(self):
        assert normalize_rejection_reason("   Too many typos.   ") == "Too many typos."

    @pytest.mark.parametrize(
        "reason",
        [
            "x" * REJECTION_REASON_MIN_LENGTH,
            "x" * REJECTION_REASON_MAX_LENGTH,
            "  " + "x" * REJECTION_REASON_MIN_LENGTH + "  ",
        ],
    )
    def test_reason_length_bounds_accepted(self, reason):
        assert normalize_rejection_reason(reason) == reason.strip()

    @pytest.mark.parametrize(
        "reason",
        [
            "",
            "x" * (REJECTION_REASON_MIN_LENGTH - 1),
            "   short   ",
            "x" * (REJECTION_REASON_MAX_LENGTH + 1),
        ],
    )
    def test_reason_length_bounds_rejected(self, reason):
        with pytest.raises(StateTransitionError) as exc_info:
            normalize_rejection_reason(reason)

        assert exc_info.value.reason == "invalid_reason"


# =============================================================================
# Publisher Tests
# =============================================================================


class TestTemplatePublisher:
    """Test suite for TemplatePublisher against the in-memory repository."""

    @pytest.fixture
    def repository(self):
        return InMemoryTemplateRepository()

    @pytest.fixture
    def publisher(self, repository):
        return TemplatePublisher(repository)

    @pytest.fixture
    def pending(self, repository):
        return asyncio.run(repository.add(_template()))

    def test_approve(self, publisher, repository, pending):
        """Test that approval publishes and records an audit row."""

        async def run_test():
            return await publisher.approve_template(
                pending.id, ADMIN_ID, is_verified=True, is_featured=False, authorized=True
            )

        template = asyncio.run(run_test())

        assert template.status == TemplateStatus.PUBLISHED
        assert template.is_verified is True
        assert template.is_featured is False
        assert len(repository.audit_log) == 1
        audit = repository.audit_log[0]
        assert audit.action_type == AdminActionType.APPROVE_TEMPLATE
        assert audit.admin_id == ADMIN_ID
        assert audit.target_id == pending.id
        assert audit.details == {"is_verified": True, "is_featured": False}

    def test_reject_stores_stripped_reason(self, publisher, repository, pending):
        template = asyncio.run(
            publisher.reject_template(pending.id, ADMIN_ID, f"  {VALID_REASON}  ", authorized=True)
        )

        assert template.status == TemplateStatus.REJECTED
        assert template.rejection_reason == VALID_REASON
        assert repository.audit_log[0].action_type == AdminActionType.REJECT_TEMPLATE
        assert repository.audit_log[0].details == {"reason": VALID_REASON}

    def test_approve_published_template_fails(self, publisher, repository):
        """Test that approving an already published template changes nothing."""
        published = asyncio.run(repository.add(_template(TemplateStatus.PUBLISHED)))
        published.is_featured = True

        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(
                publisher.approve_template(published.id, ADMIN_ID, is_featured=False, authorized=True)
            )

        assert exc_info.value.reason == "invalid_state"
        stored = asyncio.run(repository.get(published.id))
        assert stored.status == TemplateStatus.PUBLISHED
        assert stored.is_featured is True
        assert repository.audit_log == []

    def test_rejected_template_cannot_be_approved(self, publisher, repository, pending):
        asyncio.run(publisher.reject_template(pending.id, ADMIN_ID, VALID_REASON, authorized=True))

        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(publisher.approve_template(pending.id, ADMIN_ID, authorized=True))

        assert exc_info.value.reason == "invalid_state"
        assert len(repository.audit_log) == 1

    def test_unauthorized_caller(self, publisher, repository, pending):
        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(publisher.approve_template(pending.id, ADMIN_ID, authorized=False))

        assert exc_info.value.reason == "unauthorized"
        assert pending.status == TemplateStatus.PENDING
        assert repository.audit_log == []

    def test_unauthorized_reject_checked_once_before_reason(self, publisher, pending, caplog):
        """Test that an unauthorized reject fails on authorization, not on the reason."""
        with caplog.at_level(logging.WARNING, logger="app.strategies.moderation.publisher"):
            with pytest.raises(StateTransitionError) as exc_info:
                asyncio.run(publisher.reject_template(pending.id, ADMIN_ID, "meh", authorized=False))

        assert exc_info.value.reason == "unauthorized"
        assert len(caplog.records) == 1
        assert pending.status == TemplateStatus.PENDING

    def test_missing_template(self, publisher):
        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(publisher.approve_template(uuid.uuid4(), ADMIN_ID, authorized=True))

        assert exc_info.value.reason == "not_found"

    def test_invalid_reason_leaves_template_pending(self, publisher, repository, pending):
        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(publisher.reject_template(pending.id, ADMIN_ID, "   meh   ", authorized=True))

        assert exc_info.value.reason == "invalid_reason"
        assert pending.status == TemplateStatus.PENDING
        assert pending.rejection_reason is None

    def test_concurrent_decisions_only_one_wins(self, publisher, repository, pending):
        """Test that racing approve and reject cannot both succeed."""

        async def run_test():
            return await asyncio.gather(
                publisher.approve_template(pending.id, ADMIN_ID, authorized=True),
                publisher.reject_template(pending.id, ADMIN_ID, VALID_REASON, authorized=True),
                publisher.approve_template(pending.id, ADMIN_ID, authorized=True),
                return_exceptions=True,
            )

        results = asyncio.run(run_test())

        successes = [r for r in results if isinstance(r, Template)]
        failures = [r for r in results if isinstance(r, StateTransitionError)]
        assert len(successes) == 1
        assert len(failures) == 2
        assert all(f.reason == "invalid_state" for f in failures)
        assert len(repository.audit_log) == 1

    def test_lost_race_between_read_and_write(self, pending):
        """Test that a decision committed after the read makes the write fail."""

        class RacingRepository(InMemoryTemplateRepository):
            async def transition_status(self, template_id, **kwargs):
                (await self.get(template_id)).status = TemplateStatus.REJECTED
                return await super().transition_status(template_id, **kwargs)

        repository = RacingRepository()
        asyncio.run(repository.add(pending))
        publisher = TemplatePublisher(repository)

        with pytest.raises(StateTransitionError) as exc_info:
            asyncio.run(publisher.approve_template(pending.id, ADMIN_ID, authorized=True))

        assert exc_info.value.reason == "invalid_state"
        assert "rejected" in str(exc_info.value)
        assert repository.audit_log == []


# =============================================================================
# Repository Tests
# =============================================================================


class TestInMemoryTemplateRepository:
    """Test suite for the in-memory repository's conditional update."""

    def test_transition_requires_expected_status(self):
        from app.db.models import AdminAction

        repository = InMemoryTemplateRepository()
        template = asyncio.run(repository.add(_template(TemplateStatus.REJECTED)))
        audit = AdminAction(
            admin_id=ADMIN_ID,
            action_type=AdminActionType.APPROVE_TEMPLATE,
            target_id=template.id,
        )

        result = asyncio.run(
            repository.transition_status(
                template.id,
                expected=TemplateStatus.PENDING,
                target=TemplateStatus.PUBLISHED,
                changes={"is_verified": True},
                audit=audit,
            )
        )

        assert result is None
        assert template.status == TemplateStatus.REJECTED
        assert template.is_verified is False
        assert repository.audit_log == []

    def test_list_by_status_paginates(self):
        repository = InMemoryTemplateRepository()
        for _ in range(5):
            asyncio.run(repository.add(_template()))
        asyncio.run(repository.add(_template(TemplateStatus.PUBLISHED)))

        page = asyncio.run(repository.list_by_status(TemplateStatus.PENDING, page=2, page_size=2))

        assert page.total == 5
        assert len(page.items) == 2
        assert page.page == 2

    def test_update_content_keeps_status(self):
        repository = InMemoryTemplateRepository()
        template = asyncio.run(repository.add(_template(TemplateStatus.PUBLISHED)))

        updated = asyncio.run(repository.update_content(template.id, {"title": "Yeni Başlık"}))

        assert updated.title == "Yeni Başlık"
        assert updated.status == TemplateStatus.PUBLISHED
