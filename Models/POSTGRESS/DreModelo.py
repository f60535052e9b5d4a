# Models/POSTGRESS/DreModelo.py
"""
Modelo de DRE (contas modelo, contas secundárias e componentes)
e as personalizações por empresa.

ESTRUTURA:
- Conta Modelo ('contas_dre_modelo'): linha do DRE (ex: Receita Bruta, EBITDA)
- Conta Secundária: agrupamento intermediário dentro de uma conta modelo
- Componente: referência a categoria/indicador/outra conta, com peso e ordem
- Empresa x Conta: visibilidade e ordem da conta para a empresa
- Empresa x Componente: quais componentes valem para a empresa
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, Text, ForeignKey

from Models.POSTGRESS.Base import Base, novo_id

TIPOS_CONTA_MODELO = ('simples', 'composta', 'formula', 'indicador', 'soma_indicadores')
SIMBOLOS = ('+', '-', '=')
TIPOS_REFERENCIA = ('categoria', 'indicador', 'conta')


class ContaDreModelo(Base):
    __tablename__ = 'contas_dre_modelo'

    id = Column(String(36), primary_key=True, default=novo_id)
    nome = Column(String(200), nullable=False)
    tipo = Column(String(30), nullable=False, default='simples')
    simbolo = Column(String(1), nullable=True)
    expressao = Column(Text, nullable=True)
    ordem_padrao = Column(Integer, nullable=False, default=0)
    visivel = Column(Boolean, nullable=False, default=True)

    def ParaDict(self):
        return {
            "id": self.id,
            "nome": self.nome,
            "tipo": self.tipo,
            "simbolo": self.simbolo,
            "expressao": self.expressao,
            "ordem_padrao": self.ordem_padrao,
            "visivel": self.visivel,
        }

    def __repr__(self):
        return f"<ContaDreModelo(nome='{self.nome}', tipo='{self.tipo}')>"


class ContaDreSecundaria(Base):
    """Nível intermediário da árvore: conta modelo -> conta secundária -> componente."""
    __tablename__ = 'contas_dre_secundarias'

    id = Column(String(36), primary_key=True, default=novo_id)
    conta_dre_modelo_id = Column(String(36), ForeignKey('contas_dre_modelo.id'), nullable=False, index=True)
    nome = Column(String(200), nullable=False)
    ordem = Column(Integer, nullable=False, default=0)

    def ParaDict(self):
        return {"id": self.id, "conta_dre_modelo_id": self.conta_dre_modelo_id, "nome": self.nome, "ordem": self.ordem}


class ContaDreComponente(Base):
    """
    Componente de uma conta (ou conta secundária).
    conta_dre_modelo_id guarda o id da conta dona do componente; pode ser
    uma conta modelo ou uma conta da estrutura (quando o componente carrega
    apenas o nome de exibição personalizado).
    """
    __tablename__ = 'contas_dre_componentes'

    id = Column(String(36), primary_key=True, default=novo_id)
    conta_dre_modelo_id = Column(String(36), nullable=True, index=True)
    conta_secundaria_id = Column(String(36), ForeignKey('contas_dre_secundarias.id'), nullable=True, index=True)
    referencia_tipo = Column(String(20), nullable=False)
    referencia_id = Column(String(36), nullable=False)
    peso = Column(Float, nullable=False, default=1)
    ordem = Column(Integer, nullable=False, default=0)
    nome_exibicao = Column(String(200), nullable=True)

    def ParaDict(self):
        return {
            "id": self.id,
            "conta_dre_modelo_id": self.conta_dre_modelo_id,
            "conta_secundaria_id": self.conta_secundaria_id,
            "referencia_tipo": self.referencia_tipo,
            "referencia_id": self.referencia_id,
            "peso": self.peso,
            "ordem": self.ordem,
            "nome_exibicao": self.nome_exibicao,
        }

    def __repr__(self):
        return f"<ContaDreComponente({self.referencia_tipo}:{self.referencia_id} peso={self.peso})>"


class EmpresaContaDre(Base):
    """Visibilidade e ordem de uma conta modelo para uma empresa."""
    __tablename__ = 'empresas_contas_dre'

    id = Column(String(36), primary_key=True, default=novo_id)
    empresa_id = Column(String(36), ForeignKey('companies.id'), nullable=False, index=True)
    conta_dre_modelo_id = Column(String(36), ForeignKey('contas_dre_modelo.id'), nullable=False)
    ordem = Column(Integer, nullable=False, default=0)
    visivel = Column(Boolean, nullable=False, default=True)


class EmpresaComponenteDre(Base):
    """
    Seleção de componente por empresa.
    Chave lógica: (empresa, conta OU conta secundária, componente).
    """
    __tablename__ = 'empresas_componentes_dre'

    id = Column(String(36), primary_key=True, default=novo_id)
    empresa_id = Column(String(36), ForeignKey('companies.id'), nullable=False, index=True)
    conta_dre_modelo_id = Column(String(36), ForeignKey('contas_dre_modelo.id'), nullable=True)
    conta_secundaria_id = Column(String(36), ForeignKey('contas_dre_secundarias.id'), nullable=True)
    componente_id = Column(String(36), ForeignKey('contas_dre_componentes.id'), nullable=False)
