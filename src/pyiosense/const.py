"""Constants for pyiosense library."""

from __future__ import annotations


# Transport
PROTOCOL_HTTP = "http"
PROTOCOL_HTTPS = "https"
DEFAULT_TIMEOUT = 30  # seconds, per attempt
DEFAULT_TIMEZONE = "UTC"

# Retry Configuration
MAX_RETRIES = 15
RETRY_BASE_DELAY = 2.0  # seconds
RETRY_MAX_DELAY = 4.0  # seconds

# Device Defaults
DEFAULT_CURSOR_LIMIT = 25000
DEFAULT_SENSOR = "arduino"
DEFAULT_PAGE_SIZE = 10

# Millisecond timestamps have more than this many digits
UNIX_SECONDS_DIGITS = 10

# Login
USER_LOGIN_URL = "{protocol}://{backend_url}/api/login"

# User Access
USER_DETAILS_URL = "{protocol}://{backend_url}/api/account/getUserDetails"
USER_QUOTA_URL = "{protocol}://{backend_url}/api/account/profile/quota"
USER_ENTITIES_URL = "{protocol}://{backend_url}/api/account/getUserEntities"
USER_ENTITY_FETCH_URL = "{protocol}://{backend_url}/api/account/userEntity/fetch"

# Device Access
DEVICE_ALL_URL = "{protocol}://{backend_url}/api/account/devices"
DEVICE_ALL_PAGINATED_URL = "{protocol}://{backend_url}/api/account/devices/{skip}/{limit}"
DEVICE_DATA_URL = "{protocol}://{backend_url}/api/account/devices/getDeviceData/{id}"
DEVICE_BY_DEVID_URL = "{protocol}://{backend_url}/api/account/device/getDevice/{devID}"
DEVICE_LAST_DATA_POINTS_URL = "{protocol}://{backend_url}/api/account/deviceData/lastDataPoints"
DEVICE_LAST_DP_URL = "{protocol}://{backend_url}/api/account/deviceData/lastDP"
DEVICE_DATA_BY_TIME_RANGE_URL = (
    "{protocol}://{backend_url}/api/account/deviceData/getData/{devID}/{sensor}/{sTime}/{eTime}/{downSample}"
)
DEVICE_DATA_BY_TIME_RANGE_CALIBRATION_URL = (
    "{protocol}://{backend_url}/api/account/deviceData/getDataCalibration"
    "/{devID}/{sensor}/{sTime}/{eTime}/{calibration}"
)
DEVICE_LIMITED_DATA_URL = "{protocol}://{backend_url}/api/account/deviceData/getLimitedData/{devID}/{sensor}/{lim}"
DEVICE_DATA_BY_STET_URL = "{protocol}://{backend_url}/api/account/deviceData/getDataByStEt/{devID}/{sTime}/{eTime}"
DEVICE_DATA_COUNT_URL = "{protocol}://{backend_url}/api/account/deviceData/count/{devID}/{sensor}/{sTime}/{eTime}"
DEVICE_MONTHLY_CONSUMPTION_URL = "{protocol}://{backend_url}/api/account/deviceData/getMonthlyConsumption"
DEVICE_LOAD_ENTITIES_GEN_URL = "{protocol}://{backend_url}/api/account/load-entities-gen"
DEVICE_LOAD_ENTITIES_GEN_BY_ID_URL = "{protocol}://{backend_url}/api/account/load-entities-gen/{id}"
DEVICE_LOAD_ENTITIES_GEN_PAGINATED_URL = "{protocol}://{backend_url}/api/account/load-entities-gen/{page}/{limit}"

# Insights
INSIGHT_USER_FETCH_PAGINATED_URL = "{protocol}://{data_url}/api/account/bruce/userInsight/fetch/paginated"
INSIGHT_SOURCE_URL = "{protocol}://{data_url}/api/account/bruce/userInsight/fetch/getSourceInsight/{insightID}"
INSIGHT_RESULT_FETCH_PAGINATED_URL = (
    "{protocol}://{data_url}/api/account/bruce/insightResult/fetch/paginated/{insightID}"
)
INSIGHT_UPDATE_SINGLE_URL = "{protocol}://{data_url}/api/account/bruce/userInsight/update/singleUserInsight"
INSIGHT_ADD_URL = "{protocol}://{data_url}/api/account/bruce/userInsight/add"
