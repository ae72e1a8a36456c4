import pytest

from toplogs.services.counters import FrequencyTable

COMMON_LINE = '127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif?size=2 HTTP/1.0" 200 2326'
COMBINED_LINE = (
    '10.1.1.1 - - [10/Oct/2000:13:56:01 -0700] "POST /login HTTP/1.1" 302 -'
    ' "http://www.example.com/start.html" "Mozilla/4.08 [en] (Win98; I ;Nav)"'
)
GOROUTER_LINE = (
    'app.example.com - [2019-01-28T22:15:08.622+0000] "GET /v2/info?x=1 HTTP/1.1" 200 0 1234'
    ' "-" "curl/7.54.0" "10.0.0.1:52314" "10.0.0.2:61001"'
    ' x_forwarded_for:"1.2.3.4, 10.0.0.1" x_forwarded_proto:"https" vcap_request_id:"abc-123"'
    ' response_time:2.512 gorouter_time:0.001 app_id:"4b8d-app" app_index:"3"'
    ' x_cf_routererror:"-" x_b3_traceid:"aa11"'
)
GOROUTER_NO_TIMES_LINE = (
    'app.example.com - [2019-01-28T22:16:00.000+0000] "GET /health HTTP/1.1" 502 0 67'
    ' "-" "-" "10.0.0.9:40000" "-"'
    ' x_forwarded_for:"-" x_forwarded_proto:"http" vcap_request_id:"-"'
    ' response_time:- gorouter_time:- app_id:"-" app_index:"-"'
    ' x_cf_routererror:"endpoint_failure"'
)
CLOUD_CONTROLLER_LINE = (
    'api.sys.example.com - [28/Jan/2019:22:15:08 +0000] "GET /v2/apps?page=2 HTTP/1.1" 200 1234'
    ' "-" "cf/6.40.0" 10.0.0.5, 10.0.0.6 vcap_request_id:abc-123::def response_time:12.5'
)


def make_table(counts):
    table = FrequencyTable()
    for key, n in counts.items():
        for _ in range(n):
            table.increment(key)
    return table


@pytest.fixture
def sample_lines():
    return {
        "common": COMMON_LINE,
        "combined": COMBINED_LINE,
        "gorouter": GOROUTER_LINE,
        "gorouter_no_times": GOROUTER_NO_TIMES_LINE,
        "cloud_controller": CLOUD_CONTROLLER_LINE,
    }


@pytest.fixture
def table_of():
    return make_table
