"""Tests for the configuration snapshot operation."""
import json

import pytest

from crm2campmon.dynamics.entity import AttributeMetadata
from crm2campmon.dynamics.schema import RECOMMENDED_FIELDS
from crm2campmon.exceptions import CampaignMonitorAPIError
from crm2campmon.models import BasicClient
from crm2campmon.operations import LoadMetadataOperation, is_field_checked

CONTACT_ATTRIBUTES = [
    AttributeMetadata(logical_name="lastname", display_name="Last Name", is_valid_for_advanced_find=True),
    AttributeMetadata(logical_name="firstname", display_name="First Name", is_valid_for_advanced_find=True),
    AttributeMetadata(logical_name="telephone1", display_name="Business Phone", is_valid_for_advanced_find=True),
    AttributeMetadata(logical_name="emailaddress1", display_name="Email", is_valid_for_advanced_find=True),
    # Filtered out: no label / not searchable
    AttributeMetadata(logical_name="versionnumber", display_name=None, is_valid_for_advanced_find=True),
    AttributeMetadata(logical_name="yomifullname", display_name="Yomi Full Name", is_valid_for_advanced_find=False),
]


@pytest.fixture
def crm_metadata(org_service):
    """Contact attributes plus saved views, two of which pass the contact view filter."""
    org_service.attribute_metadata["contact"] = list(CONTACT_ATTRIBUTES)
    views = {}
    for name, statecode, querytype, returned in [
        ("My Active Contacts", 0, 0, "contact"),
        ("Active Contacts", 0, 0, "contact"),
        ("Inactive Contacts", 1, 0, "contact"),
        ("Contact Lookup", 0, 64, "contact"),
        ("Active Accounts", 0, 0, "account"),
    ]:
        views[name] = org_service.add(
            "savedquery",
            {"name": name, "statecode": statecode, "querytype": querytype, "returnedtypecode": returned},
        )
    return views


def _execute(context) -> dict:
    return json.loads(LoadMetadataOperation(context).execute("{}"))


# ─── field policy ─────────────────────────────────────────────────────────────

def test_recommended_fields_checked_without_explicit_selection():
    assert is_field_checked("firstname", set(), RECOMMENDED_FIELDS)
    assert not is_field_checked("telephone1", set(), RECOMMENDED_FIELDS)


def test_explicit_selection_overrides_recommendation():
    explicit = {"telephone1"}
    assert is_field_checked("telephone1", explicit, RECOMMENDED_FIELDS)
    assert not is_field_checked("firstname", explicit, RECOMMENDED_FIELDS)


def test_empty_explicit_selection_falls_back_to_recommended():
    assert is_field_checked("lastname", [], {"lastname"})


# ─── not configured ───────────────────────────────────────────────────────────

def test_no_configuration_makes_no_external_calls(context, org_service, campmon_client):
    data = _execute(context)

    assert data["ConfigurationExists"] is False
    assert data["Error"] is None
    assert data["Clients"] is None
    campmon_client.get_clients.assert_not_called()
    assert org_service.call_names() == ["retrieve_multiple"]


def test_blank_token_reports_not_configured(context, org_service, campmon_client):
    org_service.add("campmon_configuration", {"campmon_accesstoken": " ", "campmon_clientid": "c"})

    data = _execute(context)

    assert data["ConfigurationExists"] is False
    campmon_client.get_clients.assert_not_called()


# ─── configured ───────────────────────────────────────────────────────────────

def test_single_client_lists_fetched_without_configured_client(
    context, campmon_client, config_row, crm_metadata
):
    data = _execute(context)

    assert data["ConfigurationExists"] is True
    assert data["Error"] is None
    assert data["Id"] == str(config_row)
    assert data["Clients"] == [{"ClientID": "client-1", "Name": "Acme"}]
    assert [l["ListID"] for l in data["Lists"]] == ["list-1", "list-2"]
    auth = campmon_client.get_clients.call_args.args[0]
    assert auth.access_token == "access-123"
    campmon_client.get_lists.assert_called_once_with(auth, "client-1")


def test_agency_account_uses_configured_client(
    context, org_service, campmon_client, config_row, crm_metadata
):
    campmon_client.get_clients.return_value = [
        BasicClient(ClientID="client-1", Name="Acme"),
        BasicClient(ClientID="client-2", Name="Globex"),
    ]
    org_service.records["campmon_configuration"][config_row]["campmon_clientid"] = "client-2"

    data = _execute(context)

    assert len(data["Clients"]) == 2
    assert data["ClientId"] == "client-2"
    assert campmon_client.get_lists.call_args.args[1] == "client-2"
    assert data["Lists"] is not None


def test_agency_account_without_configured_client_skips_lists(
    context, campmon_client, config_row, crm_metadata
):
    campmon_client.get_clients.return_value = [
        BasicClient(ClientID="client-1", Name="Acme"),
        BasicClient(ClientID="client-2", Name="Globex"),
    ]

    data = _execute(context)

    campmon_client.get_lists.assert_not_called()
    assert data["Lists"] is None


def test_fields_use_recommended_list_without_selection(context, config_row, crm_metadata):
    data = _execute(context)

    fields = data["Fields"]
    assert [f["DisplayName"] for f in fields] == ["Business Phone", "Email", "First Name", "Last Name"]
    checked = {f["LogicalName"]: f["IsChecked"] for f in fields}
    assert checked == {
        "telephone1": False,
        "emailaddress1": True,
        "firstname": True,
        "lastname": True,
    }
    recommended = {f["LogicalName"]: f["IsRecommended"] for f in fields}
    assert recommended["telephone1"] is False
    assert recommended["firstname"] is True


def test_fields_use_explicit_selection(context, org_service, config_row, crm_metadata):
    org_service.records["campmon_configuration"][config_row]["campmon_syncfields"] = "telephone1,lastname"

    data = _execute(context)

    checked = {f["LogicalName"] for f in data["Fields"] if f["IsChecked"]}
    assert checked == {"telephone1", "lastname"}


def test_views_filtered_sorted_and_selected(context, org_service, config_row, crm_metadata):
    selected = crm_metadata["My Active Contacts"]
    org_service.records["campmon_configuration"][config_row]["campmon_syncviewid"] = str(selected)

    data = _execute(context)

    views = data["Views"]
    assert [v["ViewName"] for v in views] == ["Active Contacts", "My Active Contacts"]
    assert [v["IsSelected"] for v in views] == [False, True]
    assert views[1]["ViewId"] == str(selected)


def test_scalar_settings_copied(context, org_service, config_row, crm_metadata):
    row = org_service.records["campmon_configuration"][config_row]
    row.update(
        {
            "campmon_listid": "list-2",
            "campmon_listname": "Events",
            "campmon_clientname": "Acme",
            "campmon_syncduplicateemails": True,
            "campmon_subscriberemail": 3,
            "campmon_bulksyncinprogress": True,
        }
    )

    data = _execute(context)

    assert data["ListId"] == "list-2"
    assert data["ListName"] == "Events"
    assert data["ClientName"] == "Acme"
    assert data["SyncDuplicateEmails"] is True
    assert data["SubscriberEmail"] == 3
    assert data["BulkSyncInProgress"] is True


# ─── error boundary ───────────────────────────────────────────────────────────

def test_api_failure_returns_error_snapshot(context, campmon_client, config_row, crm_metadata):
    campmon_client.get_clients.side_effect = CampaignMonitorAPIError(None, "connection refused")

    result = LoadMetadataOperation(context).execute("{}")
    data = json.loads(result)

    assert data["Error"].startswith("Unable to retrieve configuration data.")
    assert "connection refused" in data["Error"]
    assert data["ConfigurationExists"] is False
    assert data["Clients"] is None


def test_crm_failure_returns_error_snapshot(context, org_service):
    def boom(query):
        raise RuntimeError("organization service unavailable")

    org_service.retrieve_multiple = boom

    data = json.loads(LoadMetadataOperation(context).execute(""))

    assert "organization service unavailable" in data["Error"]


def test_expired_token_refreshed_before_listing_clients(
    context, org_service, campmon_client, config_row, crm_metadata
):
    org_service.records["campmon_configuration"][config_row]["campmon_expireson"] = "2000-01-01T00:00:00Z"
    campmon_client.refresh_token.return_value = {
        "access_token": "fresh",
        "refresh_token": "fresh-refresh",
        "expires_in": 1209600,
    }

    data = _execute(context)

    assert data["Error"] is None
    campmon_client.refresh_token.assert_called_once_with("refresh-123")
    assert campmon_client.get_clients.call_args.args[0].access_token == "fresh"
    stored = org_service.records["campmon_configuration"][config_row]
    assert stored["campmon_accesstoken"] == "fresh"
    assert stored["campmon_refreshtoken"] == "fresh-refresh"


def test_unknown_subscriber_email_still_builds_snapshot(context, org_service, config_row, crm_metadata):
    org_service.records["campmon_configuration"][config_row]["campmon_subscriberemail"] = 778230000

    data = _execute(context)

    assert data["Error"] is None
    assert data["ConfigurationExists"] is True
    assert data["SubscriberEmail"] == 1


def test_fields_and_views_sorted_ignoring_case(context, org_service, config_row):
    org_service.attribute_metadata["contact"] = [
        AttributeMetadata(logical_name="new_b", display_name="beta", is_valid_for_advanced_find=True),
        AttributeMetadata(logical_name="new_a", display_name="Alpha", is_valid_for_advanced_find=True),
        AttributeMetadata(logical_name="new_c", display_name="Gamma", is_valid_for_advanced_find=True),
    ]
    for name in ["zeta contacts", "Active Contacts", "my Contacts"]:
        org_service.add(
            "savedquery",
            {"name": name, "statecode": 0, "querytype": 0, "returnedtypecode": "contact"},
        )

    data = _execute(context)

    assert [f["DisplayName"] for f in data["Fields"]] == ["Alpha", "beta", "Gamma"]
    assert [v["ViewName"] for v in data["Views"]] == ["Active Contacts", "my Contacts", "zeta contacts"]
