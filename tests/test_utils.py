import unittest
from etf_dividends import utils
from etf_dividends.models import DividendRecord


def rec(ex_date, amount="$0.10"):
    return DividendRecord(ex_date, amount, "", "")


class TestNormalizeDate(unittest.TestCase):
    def test_month_day_year(self):
        self.assertEqual(utils.normalize_date("Oct 31, 2025"), "2025-10-31")
        self.assertEqual(utils.normalize_date("Sep 5, 2025"), "2025-09-05")
        self.assertEqual(utils.normalize_date("  Jan 2, 2024 "), "2024-01-02")

    def test_blank_passthrough(self):
        self.assertEqual(utils.normalize_date(""), "")
        self.assertEqual(utils.normalize_date("   "), "   ")

    def test_unparseable_passthrough(self):
        for text in ["N/A", "not a date", "-"]:
            self.assertEqual(utils.normalize_date(text), text)

    def test_partial_dates_passthrough(self):
        for text in ["May", "10", "Oct 31", "2025", "10:30"]:
            self.assertEqual(utils.parse_date(text), (text, False))

    def test_parse_date_reports_degradation(self):
        self.assertEqual(utils.parse_date("Oct 31, 2025"), ("2025-10-31", True))
        self.assertEqual(utils.parse_date("N/A"), ("N/A", False))

    def test_normalize_record_keeps_amount(self):
        r = utils.normalize_record("Oct 31, 2025", "$1,234.50", "Oct 31, 2025", "")
        self.assertEqual(r, DividendRecord("2025-10-31", "$1,234.50", "2025-10-31", ""))


class TestMergeDividends(unittest.TestCase):
    def test_cutoff(self):
        existing = [rec("2025-10-01", "$old")]
        harvested = [rec("2025-10-01", "$new"), rec("2025-11-01"), rec("2025-09-01")]
        merged = utils.merge_dividends(existing, harvested)
        self.assertEqual([r.ex_dividend_date for r in merged], ["2025-11-01", "2025-10-01"])
        # existing rows are trusted over re-scraped duplicates
        self.assertEqual(merged[1].cash_amount, "$old")

    def test_first_save_sorts_descending(self):
        harvested = [rec("2024-01-05"), rec("2025-03-01"), rec("2024-07-15")]
        merged = utils.merge_dividends([], harvested)
        self.assertEqual([r.ex_dividend_date for r in merged],
                         ["2025-03-01", "2024-07-15", "2024-01-05"])

    def test_no_harvested_rows(self):
        existing = [rec("2025-10-01"), rec("2025-09-01"), rec("2025-08-01")]
        self.assertEqual(utils.merge_dividends(existing, []), existing)

    def test_result_sorted_and_superset(self):
        existing = [rec("2025-06-01"), rec("2025-03-01")]
        harvested = [rec("2025-09-01"), rec("2025-01-01"), rec("2025-07-15"), rec("2025-06-01")]
        merged = utils.merge_dividends(existing, harvested)
        dates = [r.ex_dividend_date for r in merged]
        self.assertEqual(dates, sorted(dates, reverse=True))
        for r in existing:
            self.assertIn(r, merged)
        self.assertEqual(len(merged), 4)

if __name__ == "__main__":
    unittest.main()
