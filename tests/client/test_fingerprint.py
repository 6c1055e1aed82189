from self_attendance.client.fingerprint import build_device_fingerprint

EDGE_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91"
)
CHROME_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.2 Mobile/15E148 Safari/604.1"
)
CHROME_ANDROID_PHONE = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Mobile Safari/537.36"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 17_2 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.2 Mobile/15E148 Safari/604.1"
)


def test_edge_wins_over_chrome():
    fp = build_device_fingerprint(EDGE_WINDOWS)

    assert fp.browser == "Edge"
    assert fp.os == "Windows"
    assert fp.device_type == "desktop"


def test_chrome_wins_over_safari():
    fp = build_device_fingerprint(CHROME_MAC)

    assert fp.browser == "Chrome"
    assert fp.os == "macOS"


def test_safari_on_iphone():
    fp = build_device_fingerprint(SAFARI_IPHONE)

    assert (fp.device_type, fp.os, fp.browser) == ("mobile", "iOS", "Safari")


def test_android_phone_is_mobile_android():
    fp = build_device_fingerprint(CHROME_ANDROID_PHONE)

    assert (fp.device_type, fp.os, fp.browser) == ("mobile", "Android", "Chrome")


def test_ipad_is_tablet():
    assert build_device_fingerprint(IPAD).device_type == "tablet"


def test_firefox_on_linux():
    fp = build_device_fingerprint(FIREFOX_LINUX)

    assert (fp.device_type, fp.os, fp.browser) == ("desktop", "Linux", "Firefox")


def test_empty_user_agent_never_fails():
    fp = build_device_fingerprint(None)

    assert (fp.device_type, fp.os, fp.browser, fp.user_agent) == ("desktop", "Unknown", "Unknown", "")
    assert fp.to_dict() == {"deviceType": "desktop", "os": "Unknown", "browser": "Unknown", "userAgent": ""}
