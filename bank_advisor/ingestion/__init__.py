"""
Record acquisition from bank websites.

Modules
-------
scraper : RecordSource port + BankRateScraper (httpx + BeautifulSoup, with
          synthetic records when a site cannot be read).
"""
