from sqlalchemy import or_, select

from Models.POSTGRESS.Cadastros import Categoria, Indicador
from Models.POSTGRESS.DreModelo import (
    ContaDreModelo,
    ContaDreSecundaria,
    ContaDreComponente,
    EmpresaContaDre,
    EmpresaComponenteDre,
    TIPOS_CONTA_MODELO,
    SIMBOLOS,
    TIPOS_REFERENCIA,
)
from Utils.Common import parse_bool, parse_int
from Utils.Logger import RegistrarLog


class DreModeloService:
    """
    Serviço do editor do Modelo de DRE:
    contas modelo, contas secundárias e componentes (upsert pelo 'id').
    """

    def __init__(self, session):
        self.session = session

    # ============================================================
    # CONTAS MODELO
    # ============================================================

    def ListarContasModelo(self):
        contas = self.session.query(ContaDreModelo).order_by(ContaDreModelo.ordem_padrao).all()
        return [c.ParaDict() for c in contas]

    def SalvarContaModelo(self, dados):
        """Upsert: com 'id' atualiza, sem 'id' insere."""
        nome = (dados.get('nome') or '').strip()
        if not nome:
            raise ValueError("Informe o nome da conta.")

        tipo = dados.get('tipo') or 'simples'
        if tipo not in TIPOS_CONTA_MODELO:
            raise ValueError(f"Tipo de conta inválido: {tipo}")

        simbolo = dados.get('simbolo') or None
        if simbolo is not None and simbolo not in SIMBOLOS:
            raise ValueError(f"Símbolo inválido: {simbolo}")

        campos = {
            "nome": nome,
            "tipo": tipo,
            "simbolo": simbolo,
            "expressao": (dados.get('expressao') or None) if tipo == 'formula' else None,
            "ordem_padrao": parse_int(dados.get('ordem_padrao')),
            "visivel": parse_bool(dados.get('visivel', True)),
        }

        conta = self.session.get(ContaDreModelo, dados['id']) if dados.get('id') else None
        if conta:
            for campo, valor in campos.items():
                setattr(conta, campo, valor)
        else:
            conta = ContaDreModelo(**campos)
            if dados.get('id'):
                conta.id = dados['id']
            self.session.add(conta)

        self.session.flush()
        RegistrarLog(f"Conta modelo '{conta.nome}' salva.", "CONFIG")
        return conta.ParaDict()

    def ExcluirContaModelo(self, conta_id):
        """
        Exclui a conta modelo junto com o que pendura nela: contas secundárias,
        componentes e as personalizações das empresas.
        Componentes de outras contas que a referenciam não são verificados.
        """
        secundarias = select(ContaDreSecundaria.id).where(ContaDreSecundaria.conta_dre_modelo_id == conta_id)
        filtro_componentes = or_(
            ContaDreComponente.conta_dre_modelo_id == conta_id,
            ContaDreComponente.conta_secundaria_id.in_(secundarias),
        )
        componentes = select(ContaDreComponente.id).where(filtro_componentes)

        self.session.query(EmpresaComponenteDre).filter(or_(
            EmpresaComponenteDre.conta_dre_modelo_id == conta_id,
            EmpresaComponenteDre.conta_secundaria_id.in_(secundarias),
            EmpresaComponenteDre.componente_id.in_(componentes),
        )).delete(synchronize_session=False)
        self.session.query(EmpresaContaDre).filter(
            EmpresaContaDre.conta_dre_modelo_id == conta_id
        ).delete(synchronize_session=False)
        self.session.query(ContaDreComponente).filter(filtro_componentes).delete(synchronize_session=False)
        self.session.query(ContaDreSecundaria).filter(
            ContaDreSecundaria.conta_dre_modelo_id == conta_id
        ).delete(synchronize_session=False)
        qtd = self.session.query(ContaDreModelo).filter(ContaDreModelo.id == conta_id).delete(synchronize_session=False)
        if not qtd:
            raise ValueError("Conta não encontrada.")
        RegistrarLog(f"Conta modelo {conta_id} excluída.", "CONFIG")

    # ============================================================
    # CONTAS SECUNDÁRIAS
    # ============================================================

    def ListarContasSecundarias(self, conta_id):
        secundarias = self.session.query(ContaDreSecundaria).filter_by(
            conta_dre_modelo_id=conta_id
        ).order_by(ContaDreSecundaria.ordem).all()
        return [s.ParaDict() for s in secundarias]

    def SalvarContaSecundaria(self, conta_id, dados):
        nome = (dados.get('nome') or '').strip()
        if not nome:
            raise ValueError("Informe o nome da conta secundária.")
        if not self.session.get(ContaDreModelo, conta_id):
            raise ValueError("Conta não encontrada.")

        secundaria = self.session.get(ContaDreSecundaria, dados['id']) if dados.get('id') else None
        if not secundaria:
            secundaria = ContaDreSecundaria(conta_dre_modelo_id=conta_id)
            self.session.add(secundaria)

        secundaria.nome = nome
        secundaria.ordem = parse_int(dados.get('ordem'))
        self.session.flush()
        return secundaria.ParaDict()

    def ExcluirContaSecundaria(self, secundaria_id):
        """Exclui a secundária, seus componentes e as seleções das empresas."""
        componentes = select(ContaDreComponente.id).where(ContaDreComponente.conta_secundaria_id == secundaria_id)
        self.session.query(EmpresaComponenteDre).filter(or_(
            EmpresaComponenteDre.conta_secundaria_id == secundaria_id,
            EmpresaComponenteDre.componente_id.in_(componentes),
        )).delete(synchronize_session=False)
        self.session.query(ContaDreComponente).filter(
            ContaDreComponente.conta_secundaria_id == secundaria_id
        ).delete(synchronize_session=False)
        qtd = self.session.query(ContaDreSecundaria).filter(
            ContaDreSecundaria.id == secundaria_id
        ).delete(synchronize_session=False)
        if not qtd:
            raise ValueError("Conta secundária não encontrada.")

    # ============================================================
    # COMPONENTES
    # ============================================================

    def _MapaNomes(self):
        """Nomes de categorias, indicadores e contas para exibir as referências."""
        return {
            'categoria': {c.id: c.name for c in self.session.query(Categoria.id, Categoria.name)},
            'indicador': {i.id: i.name for i in self.session.query(Indicador.id, Indicador.name)},
            'conta': {c.id: c.nome for c in self.session.query(ContaDreModelo.id, ContaDreModelo.nome)},
        }

    @staticmethod
    def ResolverNomeReferencia(componente, mapa_nomes):
        return mapa_nomes.get(componente['referencia_tipo'], {}).get(componente['referencia_id'])

    def ListarComponentes(self, conta_id):
        componentes = self.session.query(ContaDreComponente).filter_by(
            conta_dre_modelo_id=conta_id
        ).order_by(ContaDreComponente.ordem).all()

        mapa = self._MapaNomes()
        resultado = []
        for c in componentes:
            item = c.ParaDict()
            item['referencia_nome'] = self.ResolverNomeReferencia(item, mapa)
            resultado.append(item)
        return resultado

    def SalvarComponente(self, conta_id, dados):
        """Upsert do componente, sempre amarrado à conta selecionada."""
        if not conta_id:
            raise ValueError("Selecione uma conta.")
        if not self.session.get(ContaDreModelo, conta_id):
            raise ValueError("Conta não encontrada.")

        secundaria_id = dados.get('conta_secundaria_id') or None
        if secundaria_id:
            secundaria = self.session.get(ContaDreSecundaria, secundaria_id)
            if not secundaria or secundaria.conta_dre_modelo_id != conta_id:
                raise ValueError("Conta secundária não pertence à conta selecionada.")

        ref_tipo = dados.get('referencia_tipo') or 'categoria'
        if ref_tipo not in TIPOS_REFERENCIA:
            raise ValueError(f"Tipo de referência inválido: {ref_tipo}")
        if not dados.get('referencia_id'):
            raise ValueError("Selecione a referência do componente.")

        try:
            peso = float(dados['peso']) if dados.get('peso') not in (None, '') else 1.0
        except (TypeError, ValueError):
            raise ValueError("Peso deve ser numérico.")

        componente = self.session.get(ContaDreComponente, dados['id']) if dados.get('id') else None
        if not componente:
            componente = ContaDreComponente()
            if dados.get('id'):
                componente.id = dados['id']
            self.session.add(componente)

        componente.conta_dre_modelo_id = conta_id
        componente.conta_secundaria_id = secundaria_id
        componente.referencia_tipo = ref_tipo
        componente.referencia_id = dados['referencia_id']
        componente.peso = peso
        componente.ordem = parse_int(dados.get('ordem'))
        if 'nome_exibicao' in dados:
            componente.nome_exibicao = dados.get('nome_exibicao') or None

        self.session.flush()
        return componente.ParaDict()

    def ExcluirComponente(self, componente_id):
        self.session.query(EmpresaComponenteDre).filter(
            EmpresaComponenteDre.componente_id == componente_id
        ).delete(synchronize_session=False)
        qtd = self.session.query(ContaDreComponente).filter(
            ContaDreComponente.id == componente_id
        ).delete(synchronize_session=False)
        if not qtd:
            raise ValueError("Componente não encontrado.")
