import logging
import os
import sys

import xlsxwriter
from xlsxwriter.exceptions import XlsxWriterException

from pr_collector.errors import FileOperationError

SHEET_COLUMNS = ["author", "sig", "repo", "link", "created_at"]


def format_console_line(record):
    return ", ".join(getattr(record, column) for column in SHEET_COLUMNS)


class ConsolePrinter:
    """
    Prints each accepted pull request as soon as it arrives.
    """

    def __init__(self, stream=None):
        self.stream = stream

    def accept(self, record):
        print(format_console_line(record), file=self.stream or sys.stdout)

    def finish(self):
        return None


class SpreadsheetWriter:
    """
    Collects accepted pull requests and writes them to a single-sheet
    workbook named after the first record's author when finished.
    """

    def __init__(self, output_dir="."):
        self.output_dir = output_dir
        self.records = []

    def accept(self, record):
        self.records.append(record)

    def finish(self):
        """
        Writes the collected records and clears them.

        Returns:
            The path of the written workbook, or None if nothing was collected.
        """
        records, self.records = self.records, []

        if not records:
            print("No data", file=sys.stderr)
            return None

        filename = os.path.join(self.output_dir, f"{records[0].author}.xlsx")
        try:
            write_workbook(filename, records)
        except (OSError, XlsxWriterException) as e:
            raise FileOperationError(f"Failed to write workbook {filename}. {e}")

        logging.info(f"Wrote {len(records)} pull requests to {filename}")
        return filename


def write_workbook(filename, records):
    workbook = xlsxwriter.Workbook(filename)
    try:
        write_sheet(workbook, records)
    finally:
        workbook.close()


def write_sheet(workbook, records):
    sheet = workbook.add_worksheet()

    title_format = workbook.add_format({"font_color": "red"})
    link_format = workbook.add_format({"font_color": "blue", "underline": 1})

    for col, title in enumerate(SHEET_COLUMNS):
        sheet.write_string(0, col, title, title_format)

    for index, record in enumerate(records):
        row = index + 1
        sheet.write_string(row, 0, record.author)
        sheet.write_string(row, 1, record.sig)
        sheet.write_string(row, 2, record.repo)
        if sheet.write_url(row, 3, record.link, link_format) != 0:
            # Links over Excel's URL length limit are kept as plain text
            logging.warning(
                f"Writing link for {record.ref} as text: {record.link[:80]}..."
            )
            sheet.write_string(row, 3, record.link, link_format)
        sheet.write_string(row, 4, record.created_at)

