from collections import defaultdict

from Models.POSTGRESS.Cadastros import Empresa, Indicador, EmpresaIndicador
from Utils.Logger import RegistrarLog

TIPOS_INDICADOR = ('manual', 'calculated')
FILTROS_TIPO = ('all',) + TIPOS_INDICADOR
OPERACOES = ('sum', 'subtract', 'multiply', 'divide')
BASES_CALCULO = ('category', 'indicator')

OPERATION_LABELS = {
    'sum': 'Soma',
    'subtract': 'Subtração',
    'multiply': 'Multiplicação',
    'divide': 'Divisão',
}


def FiltrarIndicadores(indicadores, vinculos, busca='', tipo='all', empresa_id=None):
    """
    Filtros da tela de indicadores (todos combinados com E):
    empresa (vínculo existente), texto em nome/código e tipo.
    """
    busca = (busca or '').strip().lower()
    resultado = []
    for ind in indicadores:
        if empresa_id and (ind['id'], empresa_id) not in vinculos:
            continue
        if busca and busca not in ind['name'].lower() and busca not in ind['code'].lower():
            continue
        if tipo != 'all' and ind['type'] != tipo:
            continue
        resultado.append(ind)
    return resultado


class IndicadoresService:
    """Cadastro de indicadores e ativação por empresa."""

    def __init__(self, session):
        self.session = session

    def ListarEmpresas(self):
        empresas = self.session.query(Empresa).filter(Empresa.is_active.is_(True)).order_by(Empresa.trading_name).all()
        return [e.ParaDict() for e in empresas]

    def ListarIndicadores(self, busca='', tipo='all', empresa_id=None):
        if tipo not in FILTROS_TIPO:
            raise ValueError("Filtro de tipo inválido.")

        indicadores = [i.ParaDict() for i in self.session.query(Indicador).order_by(Indicador.code).all()]
        vinculos = self.session.query(EmpresaIndicador.indicator_id, EmpresaIndicador.company_id).all()

        empresas_por_indicador = defaultdict(list)
        for v in vinculos:
            empresas_por_indicador[v.indicator_id].append(v.company_id)

        chaves = {(v.indicator_id, v.company_id) for v in vinculos}
        filtrados = FiltrarIndicadores(indicadores, chaves, busca, tipo, empresa_id)
        for ind in filtrados:
            ind['empresas'] = empresas_por_indicador.get(ind['id'], [])
            ind['operation_label'] = OPERATION_LABELS.get(ind['operation'])
        return filtrados

    def SalvarIndicador(self, dados):
        """Upsert do indicador (id presente = edição)."""
        code = (dados.get('code') or '').strip()
        name = (dados.get('name') or '').strip()
        if not code or not name:
            raise ValueError("Código e nome são obrigatórios.")

        tipo = dados.get('type') or 'manual'
        if tipo not in TIPOS_INDICADOR:
            raise ValueError(f"Tipo de indicador inválido: {tipo}")

        operation = dados.get('operation') or None
        basis = dados.get('calculation_basis') or None
        if tipo == 'calculated':
            if operation not in OPERACOES:
                raise ValueError("Selecione a operação do indicador calculado.")
            if basis not in BASES_CALCULO:
                raise ValueError("Selecione a base de cálculo do indicador calculado.")
        else:
            operation, basis = None, None

        duplicado = self.session.query(Indicador).filter(Indicador.code == code)
        if dados.get('id'):
            duplicado = duplicado.filter(Indicador.id != dados['id'])
        if duplicado.first():
            raise ValueError(f"Já existe um indicador com o código {code}.")

        indicador = self.session.get(Indicador, dados['id']) if dados.get('id') else None
        if not indicador:
            indicador = Indicador()
            self.session.add(indicador)

        indicador.code = code
        indicador.name = name
        indicador.type = tipo
        indicador.operation = operation
        indicador.calculation_basis = basis
        self.session.flush()

        RegistrarLog(f"Indicador {code} salvo.", "CONFIG")
        return indicador.ParaDict()

    def AlternarIndicadorEmpresa(self, indicador_id, empresa_id):
        """Remove o vínculo se existir, senão cria. Retorna True se ficou ativo."""
        if not self.session.get(Indicador, indicador_id):
            raise ValueError("Indicador não encontrado.")
        if not self.session.get(Empresa, empresa_id):
            raise ValueError("Empresa não encontrada.")

        vinculo = self.session.query(EmpresaIndicador).filter_by(
            indicator_id=indicador_id, company_id=empresa_id
        ).first()
        if vinculo:
            self.session.delete(vinculo)
            self.session.flush()
            return False

        self.session.add(EmpresaIndicador(indicator_id=indicador_id, company_id=empresa_id, is_active=True))
        self.session.flush()
        return True

    def ExcluirIndicador(self, indicador_id):
        """Exclui o indicador e seus vínculos com empresas na mesma transação."""
        if not self.session.get(Indicador, indicador_id):
            raise ValueError("Indicador não encontrado.")

        self.session.query(EmpresaIndicador).filter(
            EmpresaIndicador.indicator_id == indicador_id
        ).delete(synchronize_session=False)
        self.session.query(Indicador).filter(Indicador.id == indicador_id).delete(synchronize_session=False)
        RegistrarLog(f"Indicador {indicador_id} excluído.", "CONFIG")
