from common_films.extractor import (
    extract_asset,
    extract_identity,
    extract_listing,
    rating_from_code,
)
from conftest import listing_page, poster_item


def test_rating_codes_are_halved() -> None:
    assert rating_from_code(7) == 3.5
    assert rating_from_code(10) == 5
    assert rating_from_code(0) == 0
    assert rating_from_code(None) is None


def test_lazy_poster_page() -> None:
    html = listing_page([
        poster_item("the-godfather", "The Godfather", "https://img.test/gf.jpg", 7),
        poster_item("heat", "Heat", code=10),
        poster_item("alien"),
    ])
    page = extract_listing(html)

    assert [r["key"] for r in page.records] == ["the-godfather", "heat", "alien"]
    gf, heat, alien = page.records
    assert gf["title"] == "The Godfather"
    assert gf["image_ref"] == "https://img.test/gf.jpg"
    assert gf["rating"] == 3.5
    assert heat["rating"] == 5
    assert heat["image_ref"] == ""
    assert alien["rating"] is None
    assert page.next_page is None


def test_missing_title_is_derived_from_slug() -> None:
    page = extract_listing(listing_page([poster_item("the-grand-budapest-hotel")]))
    assert page.records[0]["title"] == "The Grand Budapest Hotel"


def test_poster_without_slug_is_dropped() -> None:
    html = (
        '<ul><li><div data-component-class="LazyPoster" data-item-link="/film/"><img alt="Ghost"/></div></li>'
        + poster_item("heat", "Heat")
        + "</ul>"
    )
    page = extract_listing(html)
    assert [r["key"] for r in page.records] == ["heat"]


def test_falls_back_to_film_slug_markup() -> None:
    html = """
    <ul class="poster-list">
      <li class="poster-container">
        <div class="film-poster" data-film-slug="paris-texas">
          <img alt="Paris, Texas" src="https://img.test/pt.jpg"/>
          <a href="/film/paris-texas/" data-film-name="Paris, Texas (1984)"></a>
          <span class="rating rated-9"></span>
        </div>
      </li>
      <li class="poster-container"><div class="film-poster" data-film-slug="stalker"></div></li>
    </ul>
    """
    page = extract_listing(html)

    assert [r["key"] for r in page.records] == ["paris-texas", "stalker"]
    assert page.records[0]["title"] == "Paris, Texas (1984)"
    assert page.records[0]["image_ref"] == "https://img.test/pt.jpg"
    assert page.records[1]["title"] == "Stalker"
    assert page.records[0]["rating"] == 4.5
    assert page.records[1]["rating"] is None


def test_first_matching_strategy_wins() -> None:
    html = listing_page([poster_item("heat", "Heat")]) + '<div data-film-slug="legacy-only"></div>'
    page = extract_listing(html)
    assert [r["key"] for r in page.records] == ["heat"]


def test_empty_page_is_not_an_error() -> None:
    page = extract_listing("<html><body><p>No films yet.</p></body></html>")
    assert page.records == []
    assert page.next_page is None


def test_next_page_resolved_against_base_url() -> None:
    html = listing_page([poster_item("heat")], next_href="/alice/films/page/2/")
    page = extract_listing(html, base_url="https://lb.test/alice/films/")
    assert page.next_page == "https://lb.test/alice/films/page/2/"


def test_next_page_found_even_when_no_films_match() -> None:
    page = extract_listing(listing_page([], next_href="/alice/films/page/3/"))
    assert page.records == []
    assert page.next_page == "/alice/films/page/3/"


def test_disabled_next_link_ends_pagination() -> None:
    html = (
        listing_page([poster_item("heat")])
        + '<div class="pagination"><div class="paginate-next disabled"><a href="/x/">Next</a></div></div>'
    )
    assert extract_listing(html).next_page is None


def test_asset_from_json_ld_with_cdata_wrapper() -> None:
    html = """
    <html><head>
    <script type="application/ld+json">
    /* <![CDATA[ */
    {"@type": "Movie", "name": "Heat", "image": "https://img.test/heat-ld.jpg"}
    /* ]]> */
    </script>
    <meta property="og:image" content="https://img.test/heat-og.jpg"/>
    </head></html>
    """
    assert extract_asset(html) == "https://img.test/heat-ld.jpg"


def test_asset_falls_back_to_open_graph() -> None:
    html = """
    <script type="application/ld+json">{not json</script>
    <meta property="og:image" content="https://img.test/heat-og.jpg"/>
    """
    assert extract_asset(html) == "https://img.test/heat-og.jpg"


def test_asset_poster_img_uses_srcset_and_rejects_placeholder() -> None:
    html = '<div class="poster"><img srcset="https://img.test/big.jpg 2x" src="https://img.test/small.jpg"/></div>'
    assert extract_asset(html) == "https://img.test/big.jpg"

    html = '<div class="poster"><img src="https://s.test/empty-poster-230.png"/></div>'
    assert extract_asset(html) == ""


def test_identity_from_profile_page() -> None:
    html = """
    <section class="profile-header">
      <div class="profile-avatar"><img src="https://img.test/alice.jpg"/></div>
      <div class="profile-name"><h1 class="title-3"> Alice A. </h1></div>
    </section>
    """
    identity = extract_identity(html, "alice")
    assert identity.handle == "alice"
    assert identity.display_name == "Alice A."
    assert identity.avatar_ref == "https://img.test/alice.jpg"


def test_identity_falls_back_to_handle() -> None:
    identity = extract_identity("<html></html>", "bob")
    assert identity.display_name == "bob"
    assert identity.avatar_ref == ""


def test_out_of_range_rating_code_is_unrated() -> None:
    assert rating_from_code(14) is None
    page = extract_listing(listing_page([poster_item("heat", code=14)]))
    assert page.records[0]["rating"] is None


def test_asset_skips_json_ld_too_deep_to_parse() -> None:
    html = (
        '<script type="application/ld+json">' + "[" * 200_000 + "</script>"
        '<meta property="og:image" content="https://img.test/heat-og.jpg"/>'
    )
    assert extract_asset(html) == "https://img.test/heat-og.jpg"
