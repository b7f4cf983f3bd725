"""Flask web application for Millionaire.

Every request loads the game from its save file, applies the action and
writes it back, so the server keeps no game state between requests.
"""

import os
import random

from flask import Flask, jsonify, request

from session import Session
from game import TurnPhase
import saves
from config import (
    GOAL, STARTING_BALANCE, STARTING_INCOME, STARTING_STOCKS, NEW_STOCK_COST,
    INCOME_UPGRADE_MULTIPLIER, STOCK_GENERATION,
)

app = Flask(__name__)
app.config['SAVE_DIR'] = os.environ.get('MILLIONAIRE_SAVE_DIR') or None


def get_save_dir():
    """Get the save directory, creating it if needed."""
    return saves.ensure_save_dir(app.config['SAVE_DIR'])


def get_session(name: str) -> Session:
    """Load the named save and run the start-of-turn checks."""
    session = Session.load(saves.save_path(name, get_save_dir()), log_turns=False)
    session.start_turn()
    return session


def game_status(session: Session) -> dict:
    game = session.game
    player = game.player
    return {
        'name': session.save_path.name[:-len(saves.SAVE_SUFFIX)] if session.save_path else None,
        'balance': player.balance,
        'income': player.income,
        'net_worth': game.net_worth(),
        'goal': game.goal,
        'won': session.phase == TurnPhase.WON,
        'add_stock_cost': game.add_stock_cost,
        'income_upgrade_cost': game.income_upgrade_cost,
        'stocks': [
            {
                'id': s.id,
                'name': s.name,
                'value': s.value,
                'shares': player.stock_balance(s),
                'worth': s.value * player.stock_balance(s),
                'max_shares': player.max_affordable(s),
            }
            for s in sorted(game.stocks)
        ],
    }


def result_response(session: Session, result):
    if result.success:
        session.save()
    status_code = 200 if result.success else 400
    return jsonify({
        'success': result.success,
        'message': result.message,
        'stock': result.stock,
        'action': result.action,
        'amount': result.amount,
        'price': result.price,
        'total': result.total,
        'status': game_status(session),
    }), status_code


@app.errorhandler(saves.SaveIOError)
def handle_io_error(error):
    if isinstance(error.error, FileNotFoundError):
        return jsonify({'success': False, 'message': 'Save not found'}), 404
    return jsonify({'success': False, 'message': str(error)}), 500


@app.errorhandler(saves.SaveAlreadyExistsError)
def handle_conflict(error):
    return jsonify({'success': False, 'message': str(error)}), 409


@app.errorhandler(saves.EmptyFileNameError)
@app.errorhandler(saves.InvalidFileNameError)
@app.errorhandler(saves.SaveDecodeError)
def handle_bad_request(error):
    return jsonify({'success': False, 'message': str(error)}), 400


@app.errorhandler(saves.PlatformNotSupportedError)
def handle_platform(error):
    return jsonify({'success': False, 'message': str(error)}), 500


def _refuse_if_won(session: Session):
    if session.phase == TurnPhase.WON:
        return jsonify({
            'success': False,
            'message': 'Game is already won',
            'status': game_status(session),
        }), 409
    return None


@app.route('/api/config')
def api_config():
    """Get configuration info."""
    return jsonify({
        'goal': GOAL,
        'starting_balance': STARTING_BALANCE,
        'starting_income': STARTING_INCOME,
        'starting_stocks': STARTING_STOCKS,
        'add_stock_cost': NEW_STOCK_COST,
        'income_upgrade_cost': STARTING_INCOME * INCOME_UPGRADE_MULTIPLIER,
        'stock_generation': STOCK_GENERATION,
    })


@app.route('/api/saves', methods=['GET'])
def api_list_saves():
    """List saved games."""
    found = saves.list_saves(get_save_dir())
    return jsonify({
        'saves': [s.name for s in found],
        'count': len(found),
    })


@app.route('/api/saves', methods=['POST'])
def api_new_game():
    """Start a new game and save it."""
    data = request.get_json(silent=True) or {}
    session = Session.new(rng=random.Random(data.get('seed')), save_dir=get_save_dir())
    session.start_turn()
    session.save()
    return jsonify(game_status(session)), 201


@app.route('/api/saves/<name>', methods=['GET'])
def api_status(name):
    """Get game status."""
    return jsonify(game_status(get_session(name)))


@app.route('/api/saves/<name>/trade', methods=['POST'])
def api_trade(name):
    """Buy or sell shares."""
    data = request.get_json(silent=True)

    if not data:
        return jsonify({'success': False, 'message': 'No data provided'}), 400

    action = str(data.get('action', '')).upper()
    if action not in ['BUY', 'SELL']:
        return jsonify({'success': False, 'message': 'Action must be BUY or SELL'}), 400

    try:
        stock_id = int(data.get('stock_id'))
        amount = int(data.get('amount', 0))
    except (ValueError, TypeError):
        return jsonify({'success': False, 'message': 'Invalid stock_id or amount'}), 400

    session = get_session(name)
    refused = _refuse_if_won(session)
    if refused:
        return refused

    if action == 'BUY':
        result = session.buy(stock_id, amount)
    else:
        result = session.sell(stock_id, amount)
    return result_response(session, result)


@app.route('/api/saves/<name>/upgrade-income', methods=['POST'])
def api_upgrade_income(name):
    """Pay for an income increase."""
    session = get_session(name)
    refused = _refuse_if_won(session)
    if refused:
        return refused
    return result_response(session, session.upgrade_income())


@app.route('/api/saves/<name>/add-stock', methods=['POST'])
def api_add_stock(name):
    """Pay to unlock a new stock."""
    session = get_session(name)
    refused = _refuse_if_won(session)
    if refused:
        return refused
    return result_response(session, session.add_stock())


@app.route('/api/saves/<name>/end-turn', methods=['POST'])
def api_end_turn(name):
    """Collect income, move every stock once and run the next turn's checks."""
    session = get_session(name)
    refused = _refuse_if_won(session)
    if refused:
        return refused

    turn_report = session.end_turn()
    session.save()
    return jsonify({
        'success': True,
        'bankrupt': [s.name for s in turn_report.bankrupt],
        'won': turn_report.phase == TurnPhase.WON,
        'status': game_status(session),
    })


@app.route('/api/saves/<name>/copy', methods=['POST'])
def api_copy(name):
    path = saves.copy(saves.save_path(name, get_save_dir()))
    return jsonify({'success': True, 'name': path.name[:-len(saves.SAVE_SUFFIX)]}), 201


@app.route('/api/saves/<name>/rename', methods=['POST'])
def api_rename(name):
    data = request.get_json(silent=True) or {}
    source = saves.save_path(name, get_save_dir())
    if not source.exists():
        return jsonify({'success': False, 'message': 'Save not found'}), 404

    path = saves.rename(source, str(data.get('name', '')))
    return jsonify({'success': True, 'name': path.name[:-len(saves.SAVE_SUFFIX)]})


@app.route('/api/saves/<name>', methods=['DELETE'])
def api_delete(name):
    saves.delete(saves.save_path(name, get_save_dir()))
    return jsonify({'success': True})


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    debug = os.environ.get('FLASK_DEBUG', '0') == '1'
    app.run(host='0.0.0.0', port=port, debug=debug)
