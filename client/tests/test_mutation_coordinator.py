import asyncio

import pytest

from storefront.schemas.cart_schema import MutationResult
from storefront.services.failures import (
    NoSession,
    PartialMutationFailure,
    TransportFailure,
    ValidationFailure,
)
from storefront.services.mutation_coordinator import QuantityMutationCoordinator


@pytest.fixture
async def loaded(signed_in, cache):
    await cache.load()
    return cache


async def test_increase_adds_one_and_reloads(loaded, coordinator, cart_service, backend, session):
    assert await coordinator.increase("productB") is True
    assert cart_service.mutation_calls() == [("add_quantity", "productB", 1)]
    assert backend.quantity("productB") == 2
    assert session.snapshot.line_for("productB").quantity == 2
    assert session.total == 30000
    assert not coordinator.is_busy("productB")


async def test_decrease_decomposes_into_remove_then_add(loaded, coordinator, cart_service, session):
    assert await coordinator.decrease("productA") is True
    assert cart_service.mutation_calls() == [
        ("remove_item", "productA"),
        ("add_quantity", "productA", 1),
    ]
    lines = [l for l in session.snapshot.lines if l.product_id == "productA"]
    assert len(lines) == 1
    assert lines[0].quantity == 1
    assert cart_service.calls[-1] == ("fetch_cart",)


async def test_decrease_singleton_removes_line(loaded, coordinator, cart_service, session):
    assert await coordinator.decrease("productB") is True
    assert cart_service.mutation_calls() == [("remove_item", "productB")]
    assert session.snapshot.line_for("productB") is None
    assert "productB" not in session.selection


async def test_decrease_singleton_matches_remove(signed_in, backend, cart_service, session_store):
    from storefront.services.cart_cache import CartSnapshotCache
    from storefront.services.cart_session import CartSession

    end_states = []
    for op in ("decrease", "remove"):
        backend.lines.clear()
        backend.add("productA", 2)
        backend.add("productB", 1)
        session = CartSession()
        cache = CartSnapshotCache(session, cart_service, session_store)
        coordinator = QuantityMutationCoordinator(session, cache, cart_service, session_store)
        await cache.load()
        await getattr(coordinator, op)("productB")
        end_states.append(
            (
                [(l.product_id, l.quantity) for l in session.snapshot.lines],
                session.selection.ids(),
                session.total,
            )
        )
    assert end_states[0] == end_states[1]
    assert end_states[0] == ([("productA", 2)], ["productA"], 20000)


async def test_remove_prunes_selection(loaded, coordinator, session):
    assert await coordinator.remove("productA") is True
    assert session.snapshot.product_ids() == ["productB"]
    assert session.selection.ids() == ["productB"]


async def test_concurrent_mutations_on_same_product_accept_one(loaded, coordinator, cart_service):
    results = await asyncio.gather(coordinator.increase("productA"), coordinator.decrease("productA"))
    assert sorted(results) == [False, True]
    assert results[0] is True
    assert cart_service.mutation_calls() == [("add_quantity", "productA", 1)]
    assert not coordinator.is_busy("productA")


async def test_flag_is_set_while_in_flight(loaded, coordinator, session):
    task = asyncio.create_task(coordinator.increase("productA"))
    await asyncio.sleep(0)
    assert coordinator.is_busy("productA")
    assert session.view()["items"][0]["busy"] is True
    assert await coordinator.remove("productA") is False
    await task
    assert not coordinator.is_busy("productA")


async def test_different_products_may_mutate_together(loaded, coordinator, backend):
    results = await asyncio.gather(coordinator.increase("productA"), coordinator.increase("productB"))
    assert results == [True, True]
    assert backend.quantity("productA") == 3
    assert backend.quantity("productB") == 2


async def test_server_rejection_surfaces_and_clears_flag(loaded, coordinator, cart_service, session):
    cart_service.fail("add_quantity", MutationResult(success=False, message="Out of stock"))
    with pytest.raises(TransportFailure) as exc:
        await coordinator.increase("productA")
    assert exc.value.user_message == "Out of stock"
    assert not coordinator.is_busy("productA")
    assert session.snapshot.line_for("productA").quantity == 2


async def test_transport_failure_on_remove_leaves_line(loaded, coordinator, cart_service, backend):
    cart_service.fail("remove_item", TransportFailure(status=500))
    with pytest.raises(TransportFailure):
        await coordinator.decrease("productA")
    assert backend.quantity("productA") == 2
    assert cart_service.calls_of("add_quantity") == []
    assert not coordinator.is_busy("productA")


async def test_restore_is_retried_after_transient_failure(loaded, coordinator, cart_service, session):
    cart_service.fail("add_quantity", TransportFailure(status=502), MutationResult(success=False, message="busy"))
    assert await coordinator.decrease("productA") is True
    assert len(cart_service.calls_of("add_quantity")) == 3
    assert session.snapshot.line_for("productA").quantity == 1


async def test_restore_giving_up_is_a_partial_failure(loaded, coordinator, cart_service, backend, session):
    cart_service.fail("add_quantity", *[TransportFailure(status=502)] * 3)
    with pytest.raises(PartialMutationFailure) as exc:
        await coordinator.decrease("productA")
    assert exc.value.product_id == "productA"
    assert exc.value.quantity == 1
    assert "Could not restore quantity" in exc.value.user_message
    assert len(cart_service.calls_of("add_quantity")) == 3
    # the screen shows what the server now holds: the line is gone
    assert backend.quantity("productA") is None
    assert session.snapshot.line_for("productA") is None
    assert not coordinator.is_busy("productA")


async def test_set_quantity_used_when_available(signed_in, cache, session, cart_service, session_store):
    coordinator = QuantityMutationCoordinator(
        session, cache, cart_service, session_store, set_quantity_enabled=True
    )
    await cache.load()
    assert await coordinator.decrease("productA") is True
    assert cart_service.mutation_calls() == [("set_quantity", "productA", 1)]
    assert session.snapshot.line_for("productA").quantity == 1


async def test_mutation_of_unknown_line_is_validation_failure(loaded, coordinator, cart_service):
    with pytest.raises(ValidationFailure):
        await coordinator.increase("ghost")
    assert cart_service.mutation_calls() == []
    assert not coordinator.is_busy("ghost")


async def test_mutation_after_sign_out_is_no_session(loaded, coordinator, cart_service, signed_in):
    signed_in.sign_out()
    with pytest.raises(NoSession):
        await coordinator.increase("productA")
    assert cart_service.mutation_calls() == []
    assert not coordinator.is_busy("productA")


async def test_zero_restore_attempts_still_tries_once(session, cache, cart_service, session_store):
    coordinator = QuantityMutationCoordinator(
        session, cache, cart_service, session_store, restore_attempts=0, restore_delay_ms=0
    )
    assert coordinator.restore_attempts == 1
