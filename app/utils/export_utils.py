from datetime import datetime
from io import BytesIO

import pandas as pd
from flask import send_file

from app.utils.filtering import resolve_path


def rows_to_frame(rows, columns):
    """
    Flatten serialized rows into a DataFrame.

    ``columns`` maps a header to a dotted path into each row, so joined
    values (``shop.title``) export as plain columns.
    """
    records = [
        {header: resolve_path(row, path) for header, path in columns.items()}
        for row in rows
    ]
    return pd.DataFrame(records, columns=list(columns.keys()))


def csv_response(rows, columns, name):
    output = BytesIO()
    rows_to_frame(rows, columns).to_csv(output, index=False, encoding="utf-8")
    output.seek(0)
    filename = f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    return send_file(
        output,
        as_attachment=True,
        download_name=filename,
        mimetype="text/csv",
    )
