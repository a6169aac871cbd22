from usdt_gateway.modules.orders.allocation import Slot, candidate_slots, candidate_units, first_free_slot

WALLETS = ["TA", "TB", "TC"]


def test_candidate_units_start_at_base_and_step_by_one_unit():
    assert candidate_units(142857, 3) == [142857, 142858, 142859]


def test_empty_snapshot_picks_base_amount_on_first_wallet():
    assert first_free_slot(142857, WALLETS, set(), 100) == Slot("TA", 142857)


def test_search_is_amount_major_wallet_minor():
    slots = list(candidate_slots(100, ["TA", "TB"], set(), 2))
    assert slots == [Slot("TA", 100), Slot("TB", 100), Slot("TA", 101), Slot("TB", 101)]


def test_other_wallet_at_same_amount_is_preferred_over_higher_amount():
    occupied = {Slot("TA", 100)}
    assert first_free_slot(100, WALLETS, occupied, 100) == Slot("TB", 100)


def test_full_pool_at_base_moves_to_next_increment():
    occupied = {Slot(wallet, 100) for wallet in WALLETS}
    assert first_free_slot(100, WALLETS, occupied, 100) == Slot("TA", 101)


def test_exhausted_search_space_yields_nothing():
    occupied = {Slot(wallet, 100 + i) for wallet in WALLETS for i in range(100)}
    assert first_free_slot(100, WALLETS, occupied, 100) is None


def test_slots_beyond_search_range_do_not_count():
    occupied = {Slot(wallet, 100 + i) for wallet in WALLETS for i in range(99)}
    assert first_free_slot(100, WALLETS, occupied, 100) == Slot("TA", 199)


def test_snapshot_is_not_modified():
    occupied = frozenset({Slot("TA", 100)})
    list(candidate_slots(100, WALLETS, occupied, 5))
    assert occupied == frozenset({Slot("TA", 100)})
