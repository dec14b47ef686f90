import datetime

import pytest

from vehicle_valuation_service.app.models import RcRecord, ValuationDocumentDB, VehicleDetailsDB
from vehicle_valuation_service.app.service.exceptions import (
    CaseNotFoundError, RcRecordNotFoundError, UpstreamUnavailableError,
)
from vehicle_valuation_service.app.service.sections.rc_enrichment import (
    handle_get_vehicle_details_with_rc,
    merge_rc_record,
    parse_rc_date,
    parse_rc_float,
    parse_rc_int,
)

# Trimmed response of the RC lookup service, as it arrives over the wire
RC_PAYLOAD = {
    "valid": True,
    "status": "ACTIVE",
    "registered": "14-Aug-2019",
    "manufactured": "07/2019",
    "owner": "SURESH K",
    "currentAddress": "12 MG Road, Bengaluru",
    "makerDescription": "HYUNDAI MOTOR INDIA LTD",
    "makerModel": "CRETA 1.6 SX",
    "fuelType": "DIESEL",
    "colorType": "PHANTOM BLACK",
    "chassisNumber": "MALC381CLKM123456",
    "engineNumber": "D4FBKM654321",
    "cubicCapacity": "1582.00",
    "grossWeight": "1,740",
    "seatingCapacity": "5",
    "financed": True,
    "lender": "HDFC BANK",
    "insuranceProvider": "ICICI Lombard",
    "insuranceUpto": "2025-08-13",
    "blacklistStatus": "NA",
    "exShowroomPrice": 1450000.0,
}


@pytest.fixture
def rc_record() -> RcRecord:
    return RcRecord.model_validate(RC_PAYLOAD)


def test_rc_record_reads_camel_case_payload(rc_record):
    assert rc_record.maker_model == "CRETA 1.6 SX"
    assert rc_record.current_address == "12 MG Road, Bengaluru"
    assert rc_record.ex_showroom_price == 1450000.0


def test_external_value_wins_and_missing_external_value_keeps_local():
    local = VehicleDetailsDB(make="OldMake", chassis_number="CH123")
    external = RcRecord(valid=True, maker_description="Honda", chassis_number=None)

    merged = merge_rc_record(local, external)

    assert merged.make == "Honda"
    assert merged.chassis_number == "CH123"


def test_merge_maps_dates_numbers_and_flags(rc_record):
    merged = merge_rc_record(VehicleDetailsDB(registration_number="KA01AB1234", idv=650000), rc_record)

    assert merged.registration_number == "KA01AB1234"
    assert merged.idv == 650000
    assert merged.model == "CRETA 1.6 SX"
    assert merged.owner_name == "SURESH K"
    assert merged.present_address == "12 MG Road, Bengaluru"
    assert merged.date_of_registration == datetime.datetime(2019, 8, 14, tzinfo=datetime.UTC)
    assert merged.insurance_valid_up_to == datetime.datetime(2025, 8, 13, tzinfo=datetime.UTC)
    assert (merged.month_of_mfg, merged.year_of_mfg) == (7, 2019)
    assert merged.engine_cc == 1582
    assert merged.gross_vehicle_weight == 1740.0
    assert merged.seating_capacity == 5
    assert merged.hypothecation is True
    assert merged.rc_status is True
    assert merged.blacklist_status is False


def test_merge_is_idempotent(rc_record):
    local = VehicleDetailsDB(make="Old", colour="White", owner_serial_no="2", engine_cc=1200)

    once = merge_rc_record(local, rc_record)
    twice = merge_rc_record(once, rc_record)

    assert twice == once


def test_merge_does_not_mutate_local(rc_record):
    local = VehicleDetailsDB(make="Old")
    merge_rc_record(local, rc_record)
    assert local.make == "Old"


def test_unparseable_values_leave_local_untouched():
    local = VehicleDetailsDB(engine_cc=999, date_of_registration=datetime.datetime(2010, 1, 1, tzinfo=datetime.UTC))
    external = RcRecord(valid=True, cubic_capacity="n/a", registered="sometime in 2019", maker_model="   ")

    merged = merge_rc_record(local, external)

    assert merged.engine_cc == 999
    assert merged.date_of_registration == local.date_of_registration
    assert merged.model is None


def test_blacklisted_record_sets_flag():
    merged = merge_rc_record(VehicleDetailsDB(), RcRecord(valid=True, blacklist_status="BLACKLISTED", status="SUSPENDED"))
    assert merged.blacklist_status is True
    assert merged.rc_status is False


@pytest.mark.parametrize("value, expected", [
    ("2019-08-14", datetime.datetime(2019, 8, 14, tzinfo=datetime.UTC)),
    ("2019-08-14T10:30:00Z", datetime.datetime(2019, 8, 14, 10, 30, tzinfo=datetime.UTC)),
    ("14/08/2019", datetime.datetime(2019, 8, 14, tzinfo=datetime.UTC)),
    ("07/2019", datetime.datetime(2019, 7, 1, tzinfo=datetime.UTC)),
    ("", None),
    (None, None),
    ("garbage", None),
])
def test_parse_rc_date(value, expected):
    assert parse_rc_date(value) == expected


def test_parse_rc_numbers():
    assert parse_rc_int("1,197 CC") == 1197
    assert parse_rc_float("2,350.5") == 2350.5
    assert parse_rc_float(7) == 7.0
    assert parse_rc_int(None) is None
    assert parse_rc_int("NA") is None


@pytest.mark.asyncio
async def test_with_rc_merges_and_persists(repository, case_key, mock_rc_client, rc_record):
    document = ValuationDocumentDB.new(case_key)
    document.vehicle_details = VehicleDetailsDB(make="OldMake", chassis_number="CH123", idv=500000)
    await repository.save(document)
    mock_rc_client.lookup.return_value = rc_record

    merged = await handle_get_vehicle_details_with_rc(repository, mock_rc_client, case_key)

    mock_rc_client.lookup.assert_called_once_with(case_key.vehicle_number)
    assert merged.make == "HYUNDAI MOTOR INDIA LTD"
    assert merged.chassis_number == "MALC381CLKM123456"
    assert merged.idv == 500000
    assert merged.registration_number == case_key.vehicle_number
    stored = await repository.load(case_key)
    assert stored.vehicle_details == merged


@pytest.mark.asyncio
async def test_with_rc_uses_stored_registration_number(repository, case_key, mock_rc_client, rc_record):
    document = ValuationDocumentDB.new(case_key)
    document.vehicle_details = VehicleDetailsDB(registration_number="KA01AB9999")
    await repository.save(document)
    mock_rc_client.lookup.return_value = rc_record

    await handle_get_vehicle_details_with_rc(repository, mock_rc_client, case_key)

    mock_rc_client.lookup.assert_called_once_with("KA01AB9999")


@pytest.mark.asyncio
async def test_with_rc_missing_case(repository, case_key, mock_rc_client):
    with pytest.raises(CaseNotFoundError):
        await handle_get_vehicle_details_with_rc(repository, mock_rc_client, case_key)
    mock_rc_client.lookup.assert_not_called()


@pytest.mark.asyncio
async def test_with_rc_no_record(repository, case_key, mock_rc_client):
    await repository.save(ValuationDocumentDB.new(case_key))
    mock_rc_client.lookup.return_value = None

    with pytest.raises(RcRecordNotFoundError) as exc_info:
        await handle_get_vehicle_details_with_rc(repository, mock_rc_client, case_key)
    assert exc_info.value.registration_number == case_key.vehicle_number


@pytest.mark.asyncio
async def test_with_rc_upstream_failure_propagates_and_keeps_local(repository, case_key, mock_rc_client):
    document = ValuationDocumentDB.new(case_key)
    document.vehicle_details = VehicleDetailsDB(make="OldMake")
    await repository.save(document)
    mock_rc_client.lookup.side_effect = UpstreamUnavailableError("rc-lookup", "timeout")

    with pytest.raises(UpstreamUnavailableError):
        await handle_get_vehicle_details_with_rc(repository, mock_rc_client, case_key)

    assert (await repository.load(case_key)).vehicle_details.make == "OldMake"
