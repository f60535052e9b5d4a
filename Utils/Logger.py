import logging
import os
from datetime import datetime
from Settings import settings  # Importa as settings já carregadas

NOME_LOGGER = 'SistemaDre'

def ConfigurarLogger(config=None):
    """
    Inicializa o sistema de logs.
    Cria a pasta e reseta o log da sessão atual.
    Em ambiente de testes (LOG_TO_FILE=False) registra apenas no console.
    """
    config = config or settings

    logger = logging.getLogger(NOME_LOGGER)
    logger.setLevel(logging.DEBUG) # Captura tudo, filtramos na chamada
    logger.handlers.clear()

    # Formatador simples: [DATA] Mensagem (O Tipo já virá na mensagem)
    formatter = logging.Formatter('[%(asctime)s] %(message)s', datefmt='%d/%m/%Y %H:%M:%S')

    if config.LOG_TO_FILE:
        log_dir = config.FULL_LOG_PATH
        arquivo_historico = os.path.join(log_dir, config.LOG_FILE_HISTORY)
        arquivo_sessao = os.path.join(log_dir, config.LOG_FILE_SESSION)

        os.makedirs(log_dir, exist_ok=True)

        # Limpa o arquivo de sessão (começa do zero)
        with open(arquivo_sessao, 'w', encoding='utf-8') as f:
            f.write(f"--- Sessão Iniciada em: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')} ---\n")

        # Handler 1: Histórico Geral (Append)
        h_history = logging.FileHandler(arquivo_historico, mode='a', encoding='utf-8')
        h_history.setFormatter(formatter)
        logger.addHandler(h_history)

        # Handler 2: Sessão Atual (Append)
        h_session = logging.FileHandler(arquivo_sessao, mode='a', encoding='utf-8')
        h_session.setFormatter(formatter)
        logger.addHandler(h_session)

    # Handler 3: Console
    h_console = logging.StreamHandler()
    h_console.setFormatter(formatter)
    logger.addHandler(h_console)

    return logger

def RegistrarLog(mensagem, tipo="INFO", erro=None):
    """
    Registra um log no sistema.

    Args:
        mensagem (str): O texto do log.
        tipo (str): Categoria do log (Ex: 'System', 'Error', 'Warning', 'HTTP', 'DRE').
        erro (Exception, opcional): Objeto de erro para detalhar exceções.
    """
    logger = logging.getLogger(NOME_LOGGER)

    tipo_upper = tipo.upper()

    # Formata a mensagem com o TIPO no início: [SYSTEM] Iniciando...
    msg_formatada = f"[{tipo_upper}] {mensagem}"

    if erro:
        msg_formatada += f" | 🔴 Erro Técnico: {str(erro)}"

    # Mapeamento para níveis do Python (logging.ERROR, logging.INFO, etc.)
    if tipo_upper in ['ERROR', 'CRITICAL', 'ERRO', 'EXCEPTION']:
        logger.error(msg_formatada)
    elif tipo_upper in ['WARNING', 'WARN', 'AVISO', 'AUTH_FAIL']:
        logger.warning(msg_formatada)
    elif tipo_upper in ['DEBUG']:
        logger.debug(msg_formatada)
    else:
        # Qualquer outro tipo (System, HTTP, DRE, Config) entra como INFO
        logger.info(msg_formatada)
