"""Purchase Workflow — verifies ordering, auto-provisioning and duplicate guards.

Invariants:
    - Unknown item -> NotFound, checked before the account is touched
    - Unknown account is provisioned when policy allows, NotFound otherwise
    - Repeated purchase -> one Purchase and one Conflict, even when the pre-check misses
"""

import pytest

from filmvault.core.enforce_catalog import EMAIL_PATTERN
from filmvault.core.errors import ConflictError, NotFoundError
from filmvault.repositories import AccountRepository, PurchaseRepository
from filmvault.services.catalog_service import CatalogService
from filmvault.services.purchase_workflow import (
    ALREADY_PURCHASED_MESSAGE, MAX_NAME_LENGTH, AutoProvisionPolicy,
    PurchaseWorkflow, placeholder_token,
)


@pytest.fixture
async def item(test_db):
    return await CatalogService(test_db).create_item(
        title="Metropolis", description="Silent classic", price=1299,
        content_url="https://cdn.example.com/m.mp4", registrant_id="r",
    )


async def test_purchase_existing_account(test_db, seed_account, item):
    purchase = await PurchaseWorkflow(test_db).purchase(seed_account.id, item.id)
    assert purchase.account_id == seed_account.id
    assert purchase.item_id == item.id
    assert purchase.item.title == "Metropolis"


async def test_unknown_item_is_not_found_and_provisions_nothing(test_db):
    with pytest.raises(NotFoundError, match="Item"):
        await PurchaseWorkflow(test_db).purchase("newcomer", "missing-item")
    assert await AccountRepository(test_db).find_by_id("newcomer") is None


async def test_unknown_account_is_auto_provisioned(test_db, item):
    await PurchaseWorkflow(test_db).purchase("walk-in", item.id)

    account = await AccountRepository(test_db).find_by_id("walk-in")
    assert account is not None
    assert account.email == "user-walk-in@filmvault.local"
    assert account.name == "User walk-in"


async def test_custom_provisioning_templates(test_db, item):
    policy = AutoProvisionPolicy(
        email_template="{account_id}@guests.example.com",
        name_template="Guest {account_id}",
    )
    await PurchaseWorkflow(test_db, policy).purchase("g1", item.id)
    account = await AccountRepository(test_db).find_by_id("g1")
    assert account.email == "g1@guests.example.com"
    assert account.name == "Guest g1"


async def test_provisioning_disabled_is_not_found(test_db, item):
    workflow = PurchaseWorkflow(test_db, AutoProvisionPolicy(enabled=False))
    with pytest.raises(NotFoundError, match="Account"):
        await workflow.purchase("walk-in", item.id)


async def test_repeated_purchase_is_conflict(test_db, seed_account, item):
    workflow = PurchaseWorkflow(test_db)
    await workflow.purchase(seed_account.id, item.id)
    with pytest.raises(ConflictError, match=ALREADY_PURCHASED_MESSAGE):
        await workflow.purchase(seed_account.id, item.id)
    assert await PurchaseRepository(test_db).count_for_item(item.id) == 1


async def test_concurrent_duplicate_caught_by_constraint(
    test_db, seed_account, item, monkeypatch,
):
    """The advisory check misses the concurrent insert; the unique constraint decides."""
    item_id, account_id = item.id, seed_account.id
    workflow = PurchaseWorkflow(test_db)
    await workflow.purchase(account_id, item_id)

    async def _miss(self, account_id, item_id):
        return False

    monkeypatch.setattr(PurchaseRepository, "has_purchased", _miss)

    with pytest.raises(ConflictError) as exc_info:
        await workflow.purchase(account_id, item_id)
    assert exc_info.value.code == "ALREADY_PURCHASED"
    assert await PurchaseRepository(test_db).count_for_item(item_id) == 1


async def test_placeholder_email_collision_is_conflict(test_db, item):
    """Another account already owns the placeholder email for this id."""
    await AccountRepository(test_db).create(
        id="someone-else", email="user-walk-in@filmvault.local", name="X",
    )
    await test_db.commit()

    with pytest.raises(ConflictError) as exc_info:
        await PurchaseWorkflow(test_db).purchase("walk-in", item.id)
    assert exc_info.value.code == "PROVISION_CONFLICT"


async def test_different_accounts_may_buy_same_item(test_db, item):
    workflow = PurchaseWorkflow(test_db)
    await workflow.purchase("a", item.id)
    await workflow.purchase("b", item.id)
    assert await PurchaseRepository(test_db).count_for_item(item.id) == 2


async def test_case_distinct_ids_provision_separate_accounts(test_db, item):
    item_id = item.id
    workflow = PurchaseWorkflow(test_db)
    await workflow.purchase("ABC", item_id)
    await workflow.purchase("abc", item_id)

    upper = await AccountRepository(test_db).find_by_id("ABC")
    lower = await AccountRepository(test_db).find_by_id("abc")
    assert upper.email != lower.email
    assert lower.email == "user-abc@filmvault.local"
    assert await PurchaseRepository(test_db).count_for_item(item_id) == 2


@pytest.mark.parametrize("account_id", ["john doe", "a@b", "x" * 200, "tab\tid"])
async def test_free_form_ids_are_provisioned(test_db, item, account_id):
    purchase = await PurchaseWorkflow(test_db).purchase(account_id, item.id)
    assert purchase.account_id == account_id

    account = await AccountRepository(test_db).find_by_id(account_id)
    assert EMAIL_PATTERN.match(account.email)
    assert account.email == account.email.lower()
    assert len(account.name) <= MAX_NAME_LENGTH


def test_placeholder_tokens_never_collide():
    assert placeholder_token("walk-in") == "walk-in"
    assert placeholder_token("ABC") != placeholder_token("abc")
    assert placeholder_token("ABC") == placeholder_token("ABC")
    assert placeholder_token("abc\n") != "abc"
    assert "." in placeholder_token("john doe")
