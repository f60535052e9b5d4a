import sys
import os

# Ajusta o path para importar módulos da raiz (Scripts/Code -> raiz)
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from Db.Connections import GetPostgresEngine
from Models.POSTGRESS.Base import Base
import Models.POSTGRESS.Cadastros  # noqa: F401
import Models.POSTGRESS.DreEstrutura  # noqa: F401
import Models.POSTGRESS.DreModelo  # noqa: F401


def criar_tabelas():
    engine = GetPostgresEngine()
    print("🛠️  Criando tabelas do DRE...")
    Base.metadata.create_all(engine)
    for nome in sorted(Base.metadata.tables):
        print(f"   ├─ {nome}")
    print("✅ Tabelas criadas com sucesso!")


if __name__ == "__main__":
    criar_tabelas()
