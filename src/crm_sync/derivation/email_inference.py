"""Domain, country and company inference from an email address."""

from typing import Optional

# TLDs that say nothing about a country
GENERIC_TLDS = frozenset({"com", "org", "io", "net", "world"})

# Full domains that never identify a customer company
PUBLIC_EMAIL_DOMAINS = frozenset(
    {
        "accounts.google.com", "data.tableau.com", "fastmail.fm", "google.com",
        "mail.angel.co", "mail.support.microsoft.com", "marketing.angel.co",
        "messaging.squareup.com", "quora.com", "sharepointonline.com", "stripe.com",
        "triberr.com", "us-east-2.amazonses.com", "us-east-2.email-abuse.amazonses.com",
        "youtube.com", "000700.com", "06111991.onmicrosoft.com", "1010space.onmicrosoft.com",
        "1030.be", "1031crowdfunding.com", "10over10.com.tw", "10vip.top", "10xds.com",
        "10xdsdata.onmicrosoft.com", "110.is", "110ftu.onmicrosoft.com", "123milhas.com.br",
        "127.co.nz", "13070173983163.onmicrosoft.com", "139.com", "1500fh.com",
        "177happy.com", "1ddp.in", "1go.ph", "1und1.de", "247international.net",
        "2801123618.onmicrosoft.com", "2be.cr", "2-m.fr", "2mr7xd.onmicrosoft.com",
        "321.ca", "360inclusive.com", "365d.fun", "365i.team", "365-office.club",
        "365svip.ru", "365v.me", "365vip.pro", "39s.top", "3asport.it", "3is.fr",
        "3l.ru", "3mjb5h.onmicrosoft.com", "3qtv.onmicrosoft.com", "3scsolution.com",
        "3shape.com", "3sixtyintegrated.com", "3wm.ma", "477home.org", "4service.net",
        "5040096080.onmicrosoft.com", "50hpvp.onmicrosoft.com", "51zyjiaoyu.com",
        "548ck2.onmicrosoft.com", "5k2u.com", "6069.com", "60decibels.com", "7-11.com",
        "75f.io", "76a.cn", "76ers.com", "7gdistributing.com", "7kqxfj.onmicrosoft.com",
        "8advisory.com", "9pay.vn", "a.de", "0px5v.onmicrosoft.com", "123.com",
        "126.com", "163.com", "tempemail.in", "tmail.com", "365e.live", "email.in",
        "emailkom.live", "mail.jusdascm.com", "vatanmail.ir", "altmails.com",
        "ccmail.uk", "chmail.ir", "freemail.hu", "gmal.com", "googlemail.com",
        "icloud.com", "icoud.com", "kkumail.com", "mail.ee", "mail.ru",
        "mailonline.co.uk", "msn.cn", "msn.com", "protonmail.com", "qq.com",
        "yandex.ru", "yopmail.com", "live.be", "live.cn", "live.co.uk", "live.com",
        "live.fi", "live.fr", "live.in", "live.is", "live.ku.th", "live.nl",
        "live.no", "live.ru", "0-1.ir", "123.ie",
    }
)

# First domain label of webmail providers (gmail.co.uk, yahoo.fr, ...)
PUBLIC_EMAIL_PROVIDERS = frozenset({"gmail", "yahoo", "hotmail", "msn", "outlook", "zoho"})

# Substrings that mark a webmail address when labelling deals
PUBLIC_DEAL_DOMAINS = frozenset(
    {
        "gmail.com", "outlook.com", "live.com", "me.com", "icloud.com",
        "live.fi", "live.nl", "mail.ru", "mailonline.co", "onmicrosoft.com", "googlemail.com",
    }
)
PUBLIC_DEAL_PROVIDERS = ("yahoo", "hotmail", "msn", "tempemail", "fastmail")


def extract_domain(email: Optional[str]) -> Optional[str]:
    """Part after the first '@', or None."""
    if not email or "@" not in email:
        return None
    return email.split("@")[1] or None


def extract_country_name(email: Optional[str]) -> Optional[str]:
    """
    Uppercased TLD as a country code, e.g. a@b.de -> 'DE'.
    Generic TLDs (com, org, io, net, world) give None.
    No TLD-to-country table is consulted.
    """
    domain = extract_domain(email)
    if not domain:
        return None
    tld = domain.split(".")[-1]
    if tld in GENERIC_TLDS:
        return None
    return tld.upper()


def is_public_domain(domain: str) -> bool:
    return domain in PUBLIC_EMAIL_DOMAINS or domain.split(".")[0] in PUBLIC_EMAIL_PROVIDERS


def extract_company_name(email: Optional[str]) -> Optional[str]:
    """
    Company guessed from the email domain: None for webmail/public domains,
    labels without the TLD for .com (a@acme.com -> 'acme'), the full domain otherwise.
    """
    domain = extract_domain(email)
    if not domain or is_public_domain(domain):
        return None
    labels = domain.split(".")
    if labels[-1] == "com":
        return ".".join(labels[:-1])
    return domain
