"""CRM schema names used by the integration."""

CONFIGURATION_ENTITY = "campmon_configuration"
CONFIGURATION_NAME = "Configuration"

CONFIGURATION_COLUMNS = [
    # OAuth tokens
    "campmon_accesstoken",
    "campmon_refreshtoken",
    "campmon_expireson",
    # Selected client and list
    "campmon_clientid",
    "campmon_clientname",
    "campmon_listid",
    "campmon_listname",
    "campmon_setuperror",
    # Sync options
    "campmon_syncduplicateemails",
    "campmon_syncfields",
    "campmon_syncviewid",
    "campmon_syncviewname",
    "campmon_subscriberemail",
    # Bulk sync state
    "campmon_bulksyncdata",
    "campmon_bulksyncinprogress",
    "campmon_configurationid",
]

CONTACT_ENTITY = "contact"

# System views (savedquery) filters
SAVED_QUERY_ENTITY = "savedquery"
# Web API exposes returnedtypecode as the entity logical name
CONTACT_RETURNED_TYPE = CONTACT_ENTITY
ACTIVE_STATE = 0
PUBLIC_VIEW_QUERY_TYPE = 0

RECOMMENDED_FIELDS = frozenset(
    {
        "address1_city",
        "address1_country",
        "address1_primarycontactname",
        "anniversary",
        "annualincome",
        "birthdate",
        "parentcustomerid",
        "department",
        "donotemail",
        "emailaddress1",
        "emailaddress2",
        "emailaddress3",
        "firstname",
        "fullname",
        "gendercode",
        "jobtitle",
        "lastusedincampaign",
        "lastname",
        "familystatuscode",
        "numberofchildren",
        "preferredcontactmethodcode",
        "statecode",
    }
)
