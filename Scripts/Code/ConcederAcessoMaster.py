import sys
import os

# Ajusta o path para importar módulos da raiz (Scripts/Code -> raiz)
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from sqlalchemy.orm import sessionmaker

from Db.Connections import GetPostgresEngine
from Models.POSTGRESS.Cadastros import UsuarioSistema


def conceder_master(login):
    """Cria (se preciso) o usuário do sistema e o promove a master com acesso a todas as empresas."""
    engine = GetPostgresEngine()
    session = sessionmaker(bind=engine)()

    print("--- INICIANDO CONCESSÃO DE ACESSO ---")

    try:
        usuario = session.query(UsuarioSistema).filter_by(auth_user_id=login).first()
        if not usuario:
            usuario = UsuarioSistema(auth_user_id=login, name=login)
            session.add(usuario)
            print(f"[+] Usuário '{login}' criado.")

        usuario.role = 'master'
        usuario.has_all_companies_access = True

        session.commit()
        print(f"\n✅ SUCESSO! Usuário '{login}' promovido a master.")

    except Exception as e:
        session.rollback()
        print(f"\n❌ ERRO: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Uso: python Scripts/Code/ConcederAcessoMaster.py <login_ad>")
        sys.exit(1)
    conceder_master(sys.argv[1])
