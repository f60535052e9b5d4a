import os
import time
from flask import current_app
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker

from Settings import settings

_engine_cache = {}

# ==========================================
# FUNÇÕES DE ENGINE (Core)
# ==========================================

def GetPostgresEngine(config=None):
    """
    Retorna a engine do PostgreSQL para a configuração informada.
    A engine é criada uma única vez por URL e reaproveitada.
    """
    config = config or settings
    url = config.get_postgres_uri()
    if url not in _engine_cache:
        # pool_pre_ping=True ajuda a evitar conexões "fantasmas"
        engine = create_engine(url, **config.get_engine_options())
        config.configurar_engine(engine)
        _engine_cache[url] = engine
    return _engine_cache[url]

def AtivarChavesEstrangeirasSqlite(engine):
    """SQLite só valida FOREIGN KEY com o pragma ligado em cada conexão."""
    @event.listens_for(engine, "connect")
    def _pragma_fk(dbapi_conn, _registro):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def CriarFabricaSessao(engine):
    """Fábrica de sessões amarrada a uma engine (injetada na app)."""
    return sessionmaker(bind=engine)

def ObterSessao():
    """
    Abre uma sessão novinha com o banco da app corrente.
    Quem abre é responsável por fechar (commit/rollback na rota).
    """
    fabrica = current_app.extensions["dre_sessao"]
    return fabrica()

# ==========================================
# DIAGNÓSTICO
# ==========================================

def check_connections(verbose=None):
    """
    Testa a conexão com o Postgres.
    Se verbose for None, usa a configuração do Settings.
    """
    if verbose is None:
        verbose = settings.SHOW_DB_LOGS

    if verbose:
        print("\n" + "="*50)
        print(f"🛠️  DIAGNÓSTICO DE AMBIENTE: {os.getenv('APP_ENV', 'DEV').upper()}")
        print("="*50)

    t0 = time.time()
    pg_status = False
    try:
        engine = GetPostgresEngine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        pg_ms = (time.time() - t0) * 1000
        pg_status = True

        if verbose:
            print(f"🐘 POSTGRESQL ✅ [ONLINE]")
            print(f"   ├─ Host: {settings.PG_HOST}")
            print(f"   ├─ Base: {settings.PG_DB}")
            print(f"   └─ ⏱️  Latência: {pg_ms:.2f} ms")
    except Exception as e:
        if verbose:
            print(f"🐘 POSTGRESQL ❌ [OFFLINE]")
            print(f"   └─ ⚠️  Erro: {str(e).splitlines()[0]}")

    if verbose:
        print("="*50 + "\n")

    return pg_status
