# Models/POSTGRESS/Base.py
"""
Base declarativa única para todas as tabelas do DRE.
Um único metadata permite chaves estrangeiras entre os módulos de modelo
e é o alvo das migrações (Flask-Migrate).
"""
from sqlalchemy.orm import declarative_base

from Utils.Common import novo_id

Base = declarative_base()

__all__ = ["Base", "novo_id"]
