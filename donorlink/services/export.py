import csv
import io

DONATION_COLUMNS = ['id', 'donor_id', 'request_id', 'recipient_name', 'blood_type', 'city', 'date', 'status']


def donations_to_csv(donations):
    """Render donations as CSV text with a header row; empty input gives an empty string"""
    if not donations:
        return ''
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=DONATION_COLUMNS, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    writer.writeheader()
    for donation in donations:
        row = donation.to_dict()
        writer.writerow({column: '' if row[column] is None else row[column] for column in DONATION_COLUMNS})
    return buffer.getvalue()
