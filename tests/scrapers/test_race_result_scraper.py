"""RaceResultScraper のテスト"""

from keiba_batch.mappers.race_results import map_race_results
from keiba_batch.scrapers.race_results import RaceResultScraper


def result_row(position, number, name, popularity):
    cells = [str(position), "3", str(number), f"<a href='#'>{name}</a>"]
    cells += ["牡3", "56", "騎手", "1:10.5", "", "", "", "36.0", "3.5", str(popularity)]
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


RESULT_HTML = (
    "<html><body><table class='race_table_01'>"
    "<tr><th>着順</th><th>枠</th><th>馬番</th><th>馬名</th></tr>"
    + result_row(1, 5, "テストホースA", 1)
    + result_row(2, 3, "テストホースB", 3)
    + result_row(3, 8, "テストホースC", 6)
    + result_row(4, 1, "テストホースD", 2)
    + "</table>"
    """
<table class="pay_table_01">
  <tr><th class="tan">単勝</th><td>5</td><td class="txt_r">350</td><td>1</td></tr>
  <tr><th class="fuku">複勝</th><td>5<br />3<br />8</td><td class="txt_r">150<br />220<br />480</td><td>1<br />3<br />6</td></tr>
  <tr><th class="waku">枠連</th><td>3 - 5</td><td class="txt_r">900</td><td>4</td></tr>
  <tr><th class="uren">馬連</th><td>3 - 5</td><td class="txt_r">1,200</td><td>4</td></tr>
</table>
<table class="pay_table_01">
  <tr><th class="wide">ワイド</th><td>3 - 5<br />5 - 8<br />3 - 8</td><td class="txt_r">400<br />900<br />1,500</td><td>3<br />9<br />15</td></tr>
  <tr><th class="sanfuku">3連複</th><td>3 - 5 - 8</td><td class="txt_r">4,560</td><td>14</td></tr>
  <tr><th class="santan">3連単</th><td>5 → 3 → 8</td><td class="txt_r">21,890</td><td>62</td></tr>
</table>
</body></html>
"""
)


class TestRaceResultParse:
    """結果ページの解析"""

    def parse(self, html=RESULT_HTML):
        scraper = RaceResultScraper(delay=0)
        return scraper.parse(scraper.get_soup(html), "202502010711", "2025-07-19", "02")

    def test_top_three_finishers(self):
        """上位3頭の着順を取得する"""
        result = self.parse()

        assert result["raceNumber"] == 11
        assert result["first_place"] == {"horse_number": 5, "horse_name": "テストホースA", "popularity": 1}
        assert result["second_place"]["horse_number"] == 3
        assert result["third_place"]["popularity"] == 6

    def test_payouts(self):
        """払戻金を取得する"""
        result = self.parse()

        assert result["win"]["payout"] == 350
        assert result["quinella"]["payout"] == 1200
        assert result["trio"]["payout"] == 4560
        assert result["trifecta"]["payout"] == 21890
        assert [horse["payout"] for horse in result["place"]["horses"]] == [150, 220, 480]
        assert result["quinella_place"]["payouts"] == [400, 900, 1500]

    def test_unconfirmed_finish_is_none(self):
        """着順が未確定ならNone"""
        html = "<html><table class='race_table_01'>" + result_row(1, 5, "A", 1) + "</table></html>"

        assert self.parse(html) is None

    def test_mapper_accepts_scraped_result(self):
        """スクレイプ結果をマッパーでAPI形式に変換できる"""
        bodies = map_race_results([self.parse()])

        entry = bodies[0]["results"][0]
        assert bodies[0]["date"] == "2025-07-19"
        assert entry["payouts"]["place"] == [150, 220, 480]
        assert entry["finish"]["first"]["horse_number"] == 5
