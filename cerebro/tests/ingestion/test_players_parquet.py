from langchain_core.embeddings import DeterministicFakeEmbedding

from cerebro.embeddings.player_profiles import build_index, load_profile_frame, profile_documents
from cerebro.parquet_builders.players import build_players_parquet
from cerebro.tools.base.player_store import PlayerStore, sql_string
from cerebro.tools.retriever.player_profiles import PlayerProfileRetriever

CSV = """unique_id,name_split,team,position,league,class,g,pts_g,ast_g,fg,c_3pt,extra_col
101,Jane Doe,State U,PG,D1,Jr,30,18.2,7.4,0.475,0.381,x
102,,Tech,SG,D1,So,20,10.0,2.0,0.41,0.33,y
103,Sam Lee,Tech,C,D1,Sr,25,--,1.1,0.58,,z
"""


def write_parquet(tmp_path):
    src = tmp_path / "players.csv"
    src.write_text(CSV)
    return build_players_parquet(src, tmp_path / "out" / "players.parquet")


def test_builder_types_columns_and_drops_unnamed_rows(tmp_path):
    out = write_parquet(tmp_path)
    store = PlayerStore(source=str(out))

    assert [r["unique_id"] for r in store.search(limit=10)] == ["101", "103"]
    sam = store.get(103)
    assert sam["pts_g"] is None
    assert sam["c_3pt"] is None
    assert sam["fg"] == 0.58
    # columns the CSV lacks still exist, as nulls
    assert sam["orb_40"] is None


def test_profile_index_round_trip(tmp_path):
    out = write_parquet(tmp_path)
    frame = load_profile_frame(str(out))
    docs = profile_documents(frame)
    assert [d.metadata["unique_id"] for d in docs] == ["101", "103"]
    assert "PTS N/A" in docs[1].page_content

    embeddings = DeterministicFakeEmbedding(size=8)
    index_dir = str(tmp_path / "index")
    retriever = PlayerProfileRetriever(index_dir=index_dir, embeddings=embeddings, num_results=1)
    assert not retriever.available()

    build_index(frame, embeddings, index_dir)
    assert retriever.available()
    hits = retriever.run("Jane Doe")
    assert len(hits) == 1
    assert hits[0]["unique_id"] in {"101", "103"}


def test_paths_with_quotes(tmp_path):
    folder = tmp_path / "coach's board"
    folder.mkdir()
    src = folder / "players.csv"
    src.write_text(CSV)
    out = build_players_parquet(src, folder / "players.parquet")

    store = PlayerStore(source=str(out))
    assert store.get("101")["name_split"] == "Jane Doe"
    assert sql_string("coach's") == "'coach''s'"
