"""
Fixed allowlist of feed hosts the proxy will fetch from.

Matching is exact on the hostname: no wildcards and no subdomain matching,
so ``bbc.com`` does not admit ``www.bbc.com`` or the other way around.
"""

from typing import FrozenSet

ALLOWED_DOMAINS: FrozenSet[str] = frozenset(
    {
        # Core news
        "feeds.bbci.co.uk",
        "www.theguardian.com",
        "feeds.npr.org",
        "news.google.com",
        "www.aljazeera.com",
        "rss.cnn.com",
        "feeds.reuters.com",
        "www.reuters.com",
        "www.bbc.com",
        "www.france24.com",
        "www.euronews.com",
        "rss.dw.com",
        # Women's rights sources
        "www.unwomen.org",
        "www.hrw.org",
        "www.amnesty.org",
        "www.girlsnotbrides.org",
        "msmagazine.com",
        "womensmediacenter.com",
        "www.equalitynow.org",
        "www.girlsglobe.org",
        "www.awid.org",
        "giwps.georgetown.edu",
        "www.womenofcolor.net",
        "www.care.org",
        "www.globalfundforwomen.org",
        "www.womenslinkworldwide.org",
        "www.feministmajority.org",
        "www.reproductiverights.org",
        "www.plannedparenthood.org",
        "www.now.org",
        "www.catalyst.org",
        "www.weforum.org",
        "www.unicef.org",
        "www.unfpa.org",
        "www.who.int",
        "www.icrw.org",
        # International orgs
        "news.un.org",
        "www.iaea.org",
        "www.crisisgroup.org",
        "worldbank.org",
        "www.imf.org",
        "www.fao.org",
        # Regional & geopolitical
        "www.cfr.org",
        "www.brookings.edu",
        "carnegieendowment.org",
        "www.rand.org",
        "www.atlanticcouncil.org",
        "english.alarabiya.net",
        "www.arabnews.com",
        "www.timesofisrael.com",
        "www.scmp.com",
        "kyivindependent.com",
        "www.thehindu.com",
        "www.premiumtimesng.com",
        "www.vanguardngr.com",
        "www.channelnewsasia.com",
        "www.africanews.com",
        # Tech
        "techcrunch.com",
        "venturebeat.com",
        "www.technologyreview.com",
        # Finance
        "finance.yahoo.com",
        "www.ft.com",
        # Misc
        "hnrss.org",
        "news.ycombinator.com",
        "rsshub.app",
    }
)


def is_domain_allowed(hostname: str) -> bool:
    """Return True if ``hostname`` is exactly one of the allowed feed hosts."""
    return hostname in ALLOWED_DOMAINS
