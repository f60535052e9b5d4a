import os
import urllib.parse
from dotenv import load_dotenv

# Carrega as variáveis do arquivo .env
load_dotenv()

class BaseConfig:
    """Configurações Base (Comuns a todos os ambientes)"""

    # Postgres
    PG_HOST = os.getenv("PGDB_HOST", "localhost")
    PG_PORT = os.getenv("PGDB_PORT", "5432")
    PG_USER = os.getenv("PGDB_USER", "postgres")
    PG_PASS = os.getenv("PGDB_PASSWORD", "")
    PG_DRIVER = os.getenv("PGDB_DRIVER", "psycopg")

    # Outras Configs
    SECRET_KEY = os.getenv("SECRET_PASSPHRASE", "chave_dev_super_secreta")
    LDAP_SERVER = os.getenv("LDAP_SERVER", "localhost")
    LDAP_DOMAIN = os.getenv("LDAP_DOMAIN", "empresa")
    SHOW_DB_LOGS = os.getenv("DB_CONNECT_LOGS", "True").lower() == "true"
    ROUTE_PREFIX = os.getenv("ROUTE_PREFIX", "")

    # Logs
    LOG_TO_FILE = True
    FULL_LOG_PATH = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "Logs"))
    LOG_FILE_HISTORY = "Historico.log"
    LOG_FILE_SESSION = "Sessao.log"

    DEBUG = False
    TESTING = False

    def get_postgres_uri(self):
        """Gera a URI de conexão do Postgres baseada na classe atual"""
        pass_encoded = urllib.parse.quote_plus(self.PG_PASS)
        # O self.PG_DB virá da classe filha
        return f"postgresql+{self.PG_DRIVER}://{self.PG_USER}:{pass_encoded}@{self.PG_HOST}:{self.PG_PORT}/{self.PG_DB}"

    def get_engine_options(self):
        """Opções repassadas ao create_engine (Flask-SQLAlchemy e scripts)."""
        return {"pool_pre_ping": True}

    def configurar_engine(self, engine):
        """Ajustes na engine recém-criada, antes da primeira conexão."""
        pass

class DevelopmentConfig(BaseConfig):
    """Ambiente de Desenvolvimento"""
    PG_DB = os.getenv("PGDB_NAME_DEV", "DRE_Gestao_DEV")
    DEBUG = True

class HomologationConfig(BaseConfig):
    """Ambiente de Homologação"""
    PG_DB = os.getenv("PGDB_NAME_HOMOLOG", "DRE_Gestao_HML")

class ProductionConfig(BaseConfig):
    """Ambiente de Produção"""
    PG_DB = os.getenv("PGDB_NAME_PROD", "DRE_Gestao")

class TestingConfig(BaseConfig):
    """Ambiente de Testes (SQLite em memória, sem arquivos de log)"""
    PG_DB = "memory"
    TESTING = True
    LOG_TO_FILE = False
    SECRET_KEY = "chave_testes"

    def get_postgres_uri(self):
        return "sqlite://"

    def get_engine_options(self):
        from sqlalchemy.pool import StaticPool
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}

    def configurar_engine(self, engine):
        from Db.Connections import AtivarChavesEstrangeirasSqlite
        AtivarChavesEstrangeirasSqlite(engine)

# Dicionário para mapear a string do .env para a Classe
config_map = {
    "development": DevelopmentConfig,
    "homologation": HomologationConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

# Lógica para instanciar a configuração correta
env_name = os.getenv("APP_ENV", "development").lower()
settings = config_map.get(env_name, DevelopmentConfig)()
