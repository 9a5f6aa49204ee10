"""
Mock TMDB API responses for testing.

Realistic responses from the TMDB API for the endpoints used by the catalog:
details, images, credits, season details and multi search.
These fixtures are used with respx to mock httpx calls in tests.
"""

# Series with three regular seasons and a specials season
# GET /tv/93405?language=en-US
TMDB_SERIES_DETAILS_RESPONSE = {
    "id": 93405,
    "name": "Squid Game",
    "original_name": "오징어 게임",
    "overview": "Hundreds of cash-strapped players accept a strange invitation...",
    "tagline": "45.6 billion won is child's play.",
    "status": "Ended",
    "first_air_date": "2021-09-17",
    "poster_path": "/dDlEmu3EZ0Pgg93K2SVNLCjCSvE.jpg",
    "backdrop_path": "/2meX1nMdScFOoV4370rqHWKmXhY.jpg",
    "vote_average": 7.8,
    "vote_count": 15000,
    "number_of_seasons": 3,
    "number_of_episodes": 22,
    "original_language": "ko",
    "origin_country": ["KR"],
    "genres": [
        {"id": 10759, "name": "Action & Adventure"},
        {"id": 9648, "name": "Mystery"},
        {"id": 18, "name": "Drama"},
    ],
    "seasons": [
        {"season_number": 0, "episode_count": 2, "name": "Specials"},
        {"season_number": 1, "episode_count": 9, "name": "Season 1"},
        {"season_number": 2, "episode_count": 7, "name": "Season 2"},
        {"season_number": 3, "episode_count": 6, "name": "Season 3"},
    ],
}

# The same identifier also exists as an (unrelated) movie
# GET /movie/93405?language=en-US
TMDB_MOVIE_SAME_ID_RESPONSE = {
    "id": 93405,
    "title": "Some Obscure Short",
    "overview": "",
    "release_date": "1998-03-02",
    "poster_path": None,
    "backdrop_path": None,
    "runtime": 12,
    "vote_average": 0.0,
    "vote_count": 0,
    "original_language": "en",
    "production_countries": [{"iso_3166_1": "US", "name": "United States of America"}],
    "genres": [],
}

# Movie details
# GET /movie/550?language=en-US
TMDB_MOVIE_DETAILS_RESPONSE = {
    "id": 550,
    "title": "Fight Club",
    "original_title": "Fight Club",
    "overview": "A ticking-time-bomb insomniac and a slippery soap salesman...",
    "tagline": "Mischief. Mayhem. Soap.",
    "status": "Released",
    "release_date": "1999-10-15",
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "backdrop_path": "/hZkgoQYus5vegHoetLkCJzb17zJ.jpg",
    "runtime": 139,
    "vote_average": 8.4,
    "vote_count": 28000,
    "original_language": "en",
    "production_countries": [
        {"iso_3166_1": "DE", "name": "Germany"},
        {"iso_3166_1": "US", "name": "United States of America"},
    ],
    "genres": [{"id": 18, "name": "Drama"}],
}

# A TV show with the same id as a movie but announcing no season
# GET /tv/550?language=en-US
TMDB_SERIES_NO_SEASON_RESPONSE = {
    "id": 550,
    "name": "Untitled Pilot",
    "first_air_date": "",
    "number_of_seasons": 0,
    "number_of_episodes": 0,
    "seasons": [],
    "genres": [],
}

# GET /tv/93405/images?include_image_language=en,null
TMDB_IMAGES_RESPONSE = {
    "id": 93405,
    "logos": [
        {"file_path": "/logo_ko.png", "iso_639_1": "ko"},
        {"file_path": "/logo_null.png", "iso_639_1": None},
        {"file_path": "/logo_en.png", "iso_639_1": "en"},
    ],
    "posters": [
        {"file_path": "/poster_en.jpg", "iso_639_1": "en"},
    ],
    "backdrops": [
        {"file_path": "/backdrop.jpg", "iso_639_1": None},
    ],
}

# GET /tv/93405/credits?language=en-US
TMDB_CREDITS_RESPONSE = {
    "id": 93405,
    "cast": [
        {
            "id": 1000 + i,
            "name": f"Actor {i}",
            "character": f"Player {456 - i}",
            "profile_path": f"/actor_{i}.jpg" if i % 3 else None,
        }
        for i in range(15)
    ],
}

# GET /tv/93405/season/1?language=en-US
TMDB_SEASON_1_RESPONSE = {
    "id": 131977,
    "season_number": 1,
    "name": "Season 1",
    "episodes": [
        {
            "episode_number": 1,
            "name": "Red Light, Green Light",
            "overview": "Hoping to win easy money, a broke and desperate Gi-hun...",
            "still_path": "/vMFJS9LIUUAmQ1thq4vJ7iHKwRz.jpg",
            "air_date": "2021-09-17",
            "runtime": 60,
            "vote_average": 7.9,
        },
        {
            "episode_number": 2,
            "name": "Hell",
            "overview": "Split on whether to continue...",
            "still_path": None,
            "air_date": "2021-09-17",
            "runtime": 63,
            "vote_average": 7.6,
        },
        {
            "episode_number": 3,
            "name": "The Man with the Umbrella",
            "overview": "",
            "still_path": "/umbrella.jpg",
            "air_date": "",
            "runtime": None,
            "vote_average": 7.8,
        },
    ],
}

# GET /search/multi?query=Squid
TMDB_MULTI_SEARCH_RESPONSE = {
    "page": 1,
    "results": [
        {
            "id": 93405,
            "media_type": "tv",
            "name": "Squid Game",
            "first_air_date": "2021-09-17",
            "poster_path": "/dDlEmu3EZ0Pgg93K2SVNLCjCSvE.jpg",
        },
        {
            "id": 1136406,
            "media_type": "person",
            "name": "Squid McSquidface",
        },
        {
            "id": 876,
            "media_type": "movie",
            "title": "The Squid and the Whale",
            "release_date": "2005-10-05",
            "poster_path": None,
        },
    ],
    "total_pages": 1,
    "total_results": 3,
}

# GET /tv/93405/external_ids
TMDB_EXTERNAL_IDS_RESPONSE = {
    "id": 93405,
    "imdb_id": "tt10919420",
    "tvdb_id": 383275,
    "wikidata_id": "Q108117218",
}
