"""Tests for the product edit session.

Tests the create/edit transaction including:
- State transitions
- Draft validation
- Deferred image upload
- Create vs. update dispatch and refresh
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from storeadmin.catalog.edit_session import (
    IMAGE_UPLOAD_WARNING,
    REFRESH_WARNING,
    ProductDraft,
    ProductEditSession,
)
from storeadmin.domain.exceptions import (
    ImageRejectedError,
    InvalidStateTransitionError,
    MutationError,
    ValidationError,
)
from storeadmin.domain.state_machines import EditMode, EditState
from storeadmin.domain.value_objects import ProductStatus
from tests.conftest import make_entry, make_error_response, make_success_response


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def editor(mock_gateway, loaded_store) -> ProductEditSession:
    """Create an idle edit session over the loaded store."""
    return ProductEditSession(mock_gateway, loaded_store)


def fill_valid(editor: ProductEditSession) -> None:
    editor.update(name="Apple", sku="SKU1", category="Fruit", price="1.5", stock="10")


def echo_created(entry_id: str = "NEW1"):
    """Gateway side effect returning the posted entry with an id."""

    async def side_effect(entry):
        return make_success_response(replace(entry, id=entry_id))

    return side_effect


# ============================================================================
# State Transitions
# ============================================================================


class TestLifecycle:
    """Tests for session state transitions."""

    @pytest.mark.asyncio
    async def test_starts_idle(self, editor):
        """Test a new session holds nothing."""
        assert editor.state is EditState.IDLE
        assert editor.draft is None

    @pytest.mark.asyncio
    async def test_begin_create_defaults(self, editor):
        """Test new drafts are prefilled with defaults."""
        draft = editor.begin_create()

        assert editor.state is EditState.EDITING
        assert editor.mode is EditMode.NEW
        assert draft.status is ProductStatus.ACTIVE
        assert draft.min_stock == 10
        assert draft.name is None

    @pytest.mark.asyncio
    async def test_begin_edit_copies_values(self, editor, loaded_store):
        """Test editing a draft never touches the live entry."""
        entry = loaded_store.require("A")
        draft = editor.begin_edit(entry)

        draft.name = "Changed"

        assert editor.mode is EditMode.EXISTING
        assert loaded_store.require("A").name == "Smart Phone X"

    @pytest.mark.asyncio
    async def test_cannot_open_twice(self, editor):
        """Test only one transaction at a time."""
        editor.begin_create()
        with pytest.raises(InvalidStateTransitionError):
            editor.begin_create()

    @pytest.mark.asyncio
    async def test_cancel_discards_without_calls(self, editor, mock_gateway):
        """Test cancel returns to idle and drops the draft and image."""
        editor.begin_create()
        editor.select_image(b"img", "a.png", "image/png")

        editor.cancel()

        assert editor.state is EditState.IDLE
        assert editor.draft is None
        assert editor.pending_image is None
        mock_gateway.upload_image.assert_not_called()
        mock_gateway.create_product.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_when_idle(self, editor):
        """Test cancel requires an open session."""
        with pytest.raises(InvalidStateTransitionError):
            editor.cancel()

    @pytest.mark.asyncio
    async def test_update_when_idle(self, editor):
        """Test draft changes require an open session."""
        with pytest.raises(InvalidStateTransitionError):
            editor.update(name="x")

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, editor):
        """Test unknown draft fields are refused."""
        editor.begin_create()
        with pytest.raises(TypeError):
            editor.update(colour="red")


# ============================================================================
# Validation
# ============================================================================


class TestDraftValidation:
    """Tests for ProductDraft.validate."""

    def test_valid(self):
        """Test a complete draft has no errors."""
        draft = ProductDraft(
            name="Apple", sku="SKU1", category="Fruit", price="1.50", stock=3
        )
        assert draft.validate() == {}

    def test_required_fields(self):
        """Test missing required fields are reported by name."""
        errors = ProductDraft(name="  ").validate()

        assert set(errors) == {"name", "sku", "category", "price", "stock"}

    @pytest.mark.parametrize(
        "changes,field",
        [
            ({"price": "-1"}, "price"),
            ({"price": "abc"}, "price"),
            ({"stock": -2}, "stock"),
            ({"stock": "2.5"}, "stock"),
            ({"stock": "--5"}, "stock"),
            ({"stock": float("nan")}, "stock"),
            ({"stock": float("inf")}, "stock"),
            ({"min_stock": Decimal("Infinity")}, "min_stock"),
            ({"price": float("nan")}, "price"),
            ({"price": float("inf")}, "price"),
            ({"min_stock": "ten"}, "min_stock"),
            ({"status": "archived"}, "status"),
        ],
    )
    def test_invalid_values(self, changes, field):
        """Test range and type checks."""
        values = dict(name="Apple", sku="SKU1", category="Fruit", price="1", stock=1)
        values.update(changes)
        assert field in ProductDraft(**values).validate()

    @pytest.mark.asyncio
    async def test_commit_with_errors_stays_editing(self, editor, mock_gateway):
        """Test validation errors keep the session open and make no calls."""
        editor.begin_create()
        editor.update(name="Apple")

        with pytest.raises(ValidationError) as exc_info:
            await editor.commit()

        assert "sku" in exc_info.value.fields
        assert editor.state is EditState.EDITING
        mock_gateway.create_product.assert_not_called()


# ============================================================================
# Images
# ============================================================================


class TestImageSelection:
    """Tests for local image selection."""

    @pytest.mark.asyncio
    async def test_accepts_small_png(self, editor, mock_gateway):
        """Test accepted images are kept locally, not uploaded."""
        editor.begin_create()

        image = editor.select_image(b"x" * 100, "a.png", "image/png")

        assert editor.pending_image is image
        assert editor.image_preview is image
        mock_gateway.upload_image.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_type(self, editor):
        """Test unsupported types are rejected."""
        editor.begin_create()
        with pytest.raises(ImageRejectedError, match="JPEG/PNG"):
            editor.select_image(b"GIF89a", "a.gif", "image/gif")

    @pytest.mark.asyncio
    async def test_size_limit_is_exclusive(self, editor):
        """Test exactly 2 MiB is rejected."""
        editor.begin_create()
        with pytest.raises(ImageRejectedError, match="smaller than 2MB"):
            editor.select_image(b"x" * (2 * 1024 * 1024), "big.png", "image/png")

        image = editor.select_image(b"x" * (2 * 1024 * 1024 - 1), "ok.png", "image/png")
        assert image.size == 2 * 1024 * 1024 - 1

    @pytest.mark.asyncio
    async def test_rejection_keeps_previous_image(self, editor):
        """Test a rejected file does not replace the accepted one."""
        editor.begin_create()
        first = editor.select_image(b"ok", "a.jpg", "image/jpeg")

        with pytest.raises(ImageRejectedError):
            editor.select_image(b"bad", "b.bmp", "image/bmp")

        assert editor.pending_image is first

    @pytest.mark.asyncio
    async def test_discard_image_shows_stored_url(self, editor, loaded_store):
        """Test discarding falls back to the stored image."""
        entry = loaded_store.require("A").with_changes(image="http://cdn/a.png")
        editor.begin_edit(entry)
        editor.select_image(b"new", "n.png", "image/png")

        editor.discard_image()

        assert editor.image_preview == "http://cdn/a.png"


# ============================================================================
# Commit
# ============================================================================


class TestCommit:
    """Tests for committing the session."""

    @pytest.mark.asyncio
    async def test_create_without_image(self, editor, mock_gateway, loaded_store):
        """Test a new entry is created and the catalog refreshed."""
        mock_gateway.create_product.side_effect = echo_created()
        editor.begin_create()
        fill_valid(editor)

        result = await editor.commit()

        sent = mock_gateway.create_product.await_args.args[0]
        assert sent.name == "Apple"
        assert sent.sku == "SKU1"
        assert sent.price == Decimal("1.50")
        assert sent.stock == 10
        assert sent.image is None
        assert sent.status is ProductStatus.ACTIVE
        assert sent.create_time is not None
        assert sent.create_time == sent.update_time

        assert result.created is True
        assert result.entry.id == "NEW1"
        assert result.warnings == ()
        mock_gateway.upload_image.assert_not_called()
        mock_gateway.list_products.assert_awaited()
        assert editor.state is EditState.IDLE
        assert editor.draft is None

    @pytest.mark.asyncio
    async def test_update_existing(self, editor, mock_gateway, loaded_store):
        """Test an edit is sent as an update keeping untouched attributes."""

        async def echo(entry_id, entry):
            return make_success_response(entry)

        mock_gateway.update_product.side_effect = echo
        editor.begin_edit(loaded_store.require("A"))
        editor.update(stock="7")

        result = await editor.commit()

        entry_id, sent = mock_gateway.update_product.await_args.args
        assert entry_id == "A"
        assert sent.id == "A"
        assert sent.stock == 7
        assert sent.sales == 340
        assert sent.supplier == "Acme"
        assert result.created is False
        mock_gateway.create_product.assert_not_called()

    @pytest.mark.asyncio
    async def test_image_uploaded_before_create(self, editor, mock_gateway):
        """Test the pending image is uploaded at commit and its URL saved."""
        mock_gateway.upload_image.return_value = make_success_response("http://cdn/x.png")
        mock_gateway.create_product.side_effect = echo_created()
        editor.begin_create()
        fill_valid(editor)
        editor.select_image(b"png", "x.png", "image/png")

        result = await editor.commit()

        mock_gateway.upload_image.assert_awaited_once_with(b"png", "x.png", "image/png")
        assert mock_gateway.create_product.await_args.args[0].image == "http://cdn/x.png"
        assert result.warnings == ()

    @pytest.mark.asyncio
    async def test_upload_failure_saves_without_image(self, editor, mock_gateway):
        """Test a failed upload still saves the entry and warns."""
        mock_gateway.upload_image.return_value = make_error_response(
            "REQUEST_ERROR", "Connection failed", 503
        )
        mock_gateway.create_product.side_effect = echo_created()
        editor.begin_create()
        fill_valid(editor)
        editor.select_image(b"png", "x.png", "image/png")

        result = await editor.commit()

        assert mock_gateway.create_product.await_args.args[0].image is None
        assert result.warnings == (IMAGE_UPLOAD_WARNING,)

    @pytest.mark.asyncio
    async def test_upload_failure_keeps_existing_image(self, editor, mock_gateway, loaded_store):
        """Test editing keeps the stored image URL if the new upload fails."""

        async def echo(entry_id, entry):
            return make_success_response(entry)

        mock_gateway.upload_image.return_value = make_error_response()
        mock_gateway.update_product.side_effect = echo
        editor.begin_edit(loaded_store.require("A").with_changes(image="http://cdn/old.png"))
        editor.select_image(b"png", "x.png", "image/png")

        await editor.commit()

        assert mock_gateway.update_product.await_args.args[1].image == "http://cdn/old.png"

    @pytest.mark.asyncio
    async def test_gateway_failure_returns_to_editing(self, editor, mock_gateway):
        """Test a refused write keeps the draft for a retry."""
        mock_gateway.create_product.return_value = make_error_response(
            "UNKNOWN_ERROR", "Server error", 500
        )
        editor.begin_create()
        fill_valid(editor)

        with pytest.raises(MutationError) as exc_info:
            await editor.commit()

        assert exc_info.value.operation == "create_product"
        assert editor.state is EditState.EDITING
        assert editor.draft.name == "Apple"

        # Retry succeeds
        mock_gateway.create_product.return_value = None
        mock_gateway.create_product.side_effect = echo_created("NEW2")
        result = await editor.commit()
        assert result.entry.id == "NEW2"

    @pytest.mark.asyncio
    async def test_refresh_failure_upserts(self, editor, mock_gateway, loaded_store):
        """Test a failed refresh falls back to inserting the saved entry."""
        mock_gateway.create_product.side_effect = echo_created("NEW3")
        mock_gateway.list_products.return_value = make_error_response(
            "TIMEOUT", "Request timed out", 504
        )
        editor.begin_create()
        fill_valid(editor)

        result = await editor.commit()

        assert result.warnings == (REFRESH_WARNING,)
        assert loaded_store.snapshot[-1].id == "NEW3"
        assert editor.state is EditState.IDLE

    @pytest.mark.asyncio
    async def test_commit_when_idle(self, editor):
        """Test committing without an open session."""
        with pytest.raises(InvalidStateTransitionError):
            await editor.commit()


def test_from_entry_round_trips_values():
    """Test drafts copy every editable attribute."""
    entry = make_entry("Z", brand="Acme", description="d", image="u")
    draft = ProductDraft.from_entry(entry)

    assert draft.name == entry.name
    assert draft.price == entry.price
    assert draft.brand == "Acme"
    assert draft.image == "u"
