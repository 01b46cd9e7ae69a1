"""Depolama faturalama uyarı hesaplaması unit testleri."""

from datetime import datetime, timedelta, timezone

from src.billing.storage_alerts import (
    FREE_STORAGE_DAYS,
    LOOKAHEAD_DAYS,
    compute_storage_alerts,
    evaluate_order,
    find_arrival_date,
    whole_days_between,
)
from src.models.logistics import Movement, MovementKind, Order

NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)


def _order(order_id, intake_days=(), dispatch_days=None, active=True, client="Acme Lojistik"):
    """`intake_days` NOW'dan kaç gün önce giriş yapıldığını verir."""
    movements = [
        Movement(f"{order_id}-IN-{i}", order_id, MovementKind.INTAKE, NOW - timedelta(days=d))
        for i, d in enumerate(intake_days)
    ]
    if dispatch_days is not None:
        movements.append(
            Movement(f"{order_id}-OUT", order_id, MovementKind.DISPATCH, NOW - timedelta(days=dispatch_days))
        )
    return Order(order_id=order_id, code=f"DO-{order_id}", client_name=client,
                 active=active, movements=movements)


class TestDayCounting:
    """Giriş tarihinden bu yana geçen tam gün sayısı."""

    def test_partial_days_round_down(self):
        arrival = NOW - timedelta(days=29, hours=23, minutes=59)
        assert whole_days_between(arrival, NOW) == 29

    def test_future_arrival_is_negative(self):
        assert whole_days_between(NOW + timedelta(hours=12), NOW) == -1

    def test_naive_timestamp_treated_as_utc(self):
        arrival = datetime(2025, 3, 1, 12, 0)
        assert whole_days_between(arrival, NOW) == 30

    def test_earliest_intake_is_arrival(self):
        order = _order("O1", intake_days=[10, 50, 20])
        assert find_arrival_date(order) == NOW - timedelta(days=50)

    def test_no_intake_has_no_arrival(self):
        order = _order("O1", dispatch_days=3)
        assert find_arrival_date(order) is None


class TestAlertInclusion:
    """Hangi siparişler uyarı üretir."""

    def test_near_boundary_order(self):
        alert = evaluate_order(_order("O1", [29]), NOW)
        assert alert is not None
        assert alert.days_elapsed == 29
        assert alert.days_remaining == 1
        assert alert.months_billable == 0
        assert alert.is_overdue is False
        assert alert.is_near_boundary is True

    def test_exactly_thirty_days_is_overdue(self):
        alert = evaluate_order(_order("O1", [30]), NOW)
        assert alert.is_overdue is True
        assert alert.days_remaining == 0
        assert alert.months_billable == 1

    def test_overdue_order(self):
        alert = evaluate_order(_order("O1", [45]), NOW)
        assert alert.is_overdue is True
        assert alert.days_to_boundary == -15
        assert alert.days_remaining == 0
        assert alert.months_billable == 1

    def test_months_billable_grows_every_thirty_days(self):
        assert evaluate_order(_order("O1", [60]), NOW).months_billable == 2
        assert evaluate_order(_order("O2", [89]), NOW).months_billable == 2
        assert evaluate_order(_order("O3", [90]), NOW).months_billable == 3

    def test_lookahead_window_edge(self):
        assert evaluate_order(_order("O1", [FREE_STORAGE_DAYS - LOOKAHEAD_DAYS]), NOW) is not None
        assert evaluate_order(_order("O2", [FREE_STORAGE_DAYS - LOOKAHEAD_DAYS - 1]), NOW) is None

    def test_almost_thirty_days_not_overdue(self):
        order = _order("O1")
        order.movements.append(
            Movement("M1", "O1", MovementKind.INTAKE, NOW - timedelta(days=29, hours=22))
        )
        alert = evaluate_order(order, NOW)
        assert alert.days_elapsed == 29
        assert alert.is_overdue is False

    def test_dispatched_order_suppressed(self):
        assert evaluate_order(_order("O1", [50], dispatch_days=5), NOW) is None

    def test_dispatch_before_intake_still_suppresses(self):
        assert evaluate_order(_order("O1", [40], dispatch_days=45), NOW) is None

    def test_order_without_intake_skipped(self):
        assert evaluate_order(_order("O1"), NOW) is None

    def test_inactive_order_skipped(self):
        assert evaluate_order(_order("O1", [60], active=False), NOW) is None

    def test_future_intake_skipped(self):
        assert evaluate_order(_order("O1", [-5]), NOW) is None

    def test_multiple_intakes_use_earliest(self):
        alert = evaluate_order(_order("O1", [10, 50]), NOW)
        assert alert.days_elapsed == 50

    def test_mixed_naive_and_aware_intakes(self):
        order = _order("O1", [10])
        order.movements.append(Movement("M2", "O1", MovementKind.INTAKE, datetime(2025, 2, 14, 12, 0)))
        alert = evaluate_order(order, NOW)
        assert alert.days_elapsed == 45


class TestAlertOrdering:
    """Uyarıların aciliyet sırası."""

    def test_overdue_first_oldest_first_then_closest_to_boundary(self):
        orders = [
            _order("A", [25]),
            _order("B", [45]),
            _order("C", [20]),
            _order("D", [75]),
            _order("E", [29]),
            _order("F", [30]),
            _order("G", [5]),
        ]
        alerts = compute_storage_alerts(orders, NOW)
        assert [a.order_id for a in alerts] == ["D", "B", "F", "E", "A", "C"]

    def test_equal_urgency_keeps_input_order(self):
        orders = [_order("X", [25]), _order("Y", [25]), _order("Z", [25])]
        alerts = compute_storage_alerts(orders, NOW)
        assert [a.order_id for a in alerts] == ["X", "Y", "Z"]

    def test_empty_input(self):
        assert compute_storage_alerts([], NOW) == []

    def test_repeated_evaluation_is_identical(self):
        orders = [_order("A", [25]), _order("B", [45]), _order("C", [50], dispatch_days=1)]
        assert compute_storage_alerts(orders, NOW) == compute_storage_alerts(orders, NOW)

    def test_accepts_generator_input(self):
        alerts = compute_storage_alerts((o for o in [_order("A", [31])]), NOW)
        assert len(alerts) == 1


class TestAlertSerialization:

    def test_to_dict_fields(self):
        alert = evaluate_order(_order("O1", [45], client="Ege Otomotiv"), NOW)
        data = alert.to_dict()
        assert data == {
            "order_id": "O1",
            "order_code": "DO-O1",
            "client_name": "Ege Otomotiv",
            "arrival_date": "2025-02-14",
            "days_elapsed": 45,
            "days_remaining": 0,
            "months_billable": 1,
            "is_overdue": True,
        }

    def test_arrival_date_formatted_in_utc(self):
        """UTC-5 akşam girişi UTC'de ertesi güne düşer; gün sayımıyla aynı takvim kullanılır."""
        eastern = timezone(timedelta(hours=-5))
        order = _order("O1")
        order.movements.append(Movement("M1", "O1", MovementKind.INTAKE, datetime(2025, 3, 1, 22, 0, tzinfo=eastern)))

        alert = evaluate_order(order, NOW)
        assert alert.to_dict()["arrival_date"] == "2025-03-02"
        assert alert.days_elapsed == 29
