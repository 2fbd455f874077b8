# Everything the routers, tools and prompts need to know about the player table lives here.
MANIFEST = {
  "tables": {
    "players": {
      "path": "data/parquet/players.parquet",
      "text_columns": ["unique_id", "name_split", "team", "position", "league", "class"],
      "metric_columns": [
        "pts_g", "reb_g", "ast_g", "fg", "c_3pt", "ft", "stl_g", "blk_g", "to_g",
        "min_g", "g", "c_2pt", "efg", "ts", "usg", "ppp", "orb_g", "drb_g", "pf_g", "a_to",
        "ram", "c_ram", "psp", "c_3pe", "dsi", "fgs", "bms", "orb_40"
      ]
    }
  },

  # Columns a ranking may order by; anything else falls back to the default
  "rankable_metrics": [
    "pts_g", "reb_g", "ast_g", "stl_g", "blk_g", "fg", "c_3pt", "ft", "efg", "ts",
    "usg", "ppp", "a_to", "orb_40", "ram", "c_ram", "psp", "c_3pe", "dsi", "fgs", "bms"
  ],
  "default_metric": "pts_g",

  # Metrics compared against the 90th percentile for the composite position ranking
  "percentile_metrics": [
    "pts_g", "reb_g", "ast_g", "stl_g", "blk_g", "fg", "c_3pt", "ft", "efg", "ts", "ppp", "a_to", "orb_40"
  ],

  # Projection returned by the ranking tools
  "ranking_columns": [
    "unique_id", "name_split", "team", "position", "class", "league", "g",
    "pts_g", "reb_g", "ast_g", "stl_g", "blk_g", "fg", "c_3pt", "ft", "usg", "a_to", "efg", "ts", "ppp",
    "ram", "c_ram", "psp", "c_3pe", "dsi", "fgs", "bms", "orb_40"
  ],

  # Phrase -> canonical position. Ordered: specific phrases before generic ones.
  "position_synonyms": [
    (r"point guards?|\bpgs?\b", "PG"),
    (r"shooting guards?|two guards?|\bsgs?\b", "SG"),
    (r"small forwards?|\bsfs?\b", "SF"),
    (r"power forwards?|\bpfs?\b", "PF"),
    (r"\bcent(?:er|re)s?\b|big m[ae]n|\bc\b", "C"),
    (r"\bguards?\b", "G"),
    (r"\bforwards?\b", "F"),
  ],

  # Phrase -> column. Checked only after the efficiency phrases below.
  "metric_keywords": [
    (r"offensive rebound", "orb_40"),
    (r"free throw|\bft\b", "ft"),
    (r"three|3pt|3-point|3 point|3p%", "c_3pt"),
    (r"field goal|\bfg\b", "fg"),
    (r"points|scor(?:e|er|ers|ing)\b|\bppg\b", "pts_g"),
    (r"rebound|boards|\brpg\b", "reb_g"),
    (r"assist|passing|passer|playmak|\bapg\b", "ast_g"),
    (r"steal", "stl_g"),
    (r"block|rim protect", "blk_g"),
    (r"usage", "usg"),
  ],

  # Efficiency phrasing that contains keyword words, so it must win first
  "efficiency_keywords": [
    (r"true shooting|\bts\b", "ts"),
    (r"effective field goal|\befg\b", "efg"),
    (r"points per possession|\bppp\b", "ppp"),
    (r"assist[- ]to[- ]turnover|assist/turnover|\ba/?to\b|ast/to", "a_to"),
  ],

  "ranking_words": r"\b(best|top|most|highest|leaders?|leading)\b",
  "effectiveness_words": r"\b(effective|efficient|impactful|productive)\b",

  # Glossary shown to the router model
  "glossary": {
    "metrics": {
      "pts_g": "points per game", "reb_g": "rebounds per game", "ast_g": "assists per game",
      "stl_g": "steals per game", "blk_g": "blocks per game", "to_g": "turnovers per game",
      "min_g": "minutes per game", "g": "games played",
      "fg": "field goal %", "c_2pt": "two point %", "c_3pt": "three point %", "ft": "free throw %",
      "efg": "effective field goal %", "ts": "true shooting %", "usg": "usage rate",
      "ppp": "points per possession", "a_to": "assist to turnover ratio",
      "orb_40": "offensive rebounds per 40 minutes"
    }
  },

  # Ratio columns shown as percentages in stat lines
  "percentage_metrics": ["fg", "c_2pt", "c_3pt", "ft", "efg", "ts"],
}

PLAYER_COLUMNS = MANIFEST["tables"]["players"]["text_columns"] + MANIFEST["tables"]["players"]["metric_columns"]
CANDIDATE_COLUMNS = ["unique_id", "name_split", "team", "position", "league", "class"]
