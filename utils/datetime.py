from datetime import datetime
import pytz


IST = pytz.timezone("Asia/Kolkata")


def convert_ist_to_utc(input_time):
    """
    Convert an IST datetime (or "YYYY-MM-DD HH:MM:SS" string) to UTC.
    Naive datetimes are assumed to be IST.
    """
    if isinstance(input_time, str):
        input_time = datetime.strptime(input_time, "%Y-%m-%d %H:%M:%S")

    if input_time.tzinfo is None:
        input_time = IST.localize(input_time)

    return input_time.astimezone(pytz.utc)


def parse_carrier_datetime(value):
    """
    Parse a carrier timestamp into an aware UTC datetime.

    Delhivery sends ISO strings in IST, with or without fractional
    seconds, and occasionally with an explicit offset.
    Returns None for empty or unparseable input.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        return convert_ist_to_utc(value)

    value = str(value).strip()

    date_formats = [
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d %H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S",
        "%d-%m-%Y %H:%M:%S",
        "%d-%m-%Y %H:%M",
    ]

    for fmt in date_formats:
        try:
            return convert_ist_to_utc(datetime.strptime(value, fmt))
        except ValueError:
            continue

    try:
        return convert_ist_to_utc(datetime.fromisoformat(value))
    except ValueError:
        return None
